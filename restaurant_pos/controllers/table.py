from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import jwt_required

from restaurant_pos.models import Table
from restaurant_pos.schemas import TableSchema, TableUpdateSchema
from restaurant_pos.services import tables
from restaurant_pos.services.helper import (
    get_all_item_logic, item_response, list_response, message_response
)
from restaurant_pos.services.permissions import MANAGE, authorize, current_caller

blp = Blueprint("Tables", __name__, description="Operations on tables")


def check_staff():
    authorize(current_caller(), MANAGE,
              message="Access forbidden: Admin role required.")


@blp.route("/tables")
class TableList(MethodView):
    @jwt_required()
    def get(self):
        return list_response(get_all_item_logic(Table), "table")

    @jwt_required()
    @blp.arguments(TableSchema)
    def post(self, table_data):
        check_staff()
        table = tables.create_table(table_data)
        return item_response(table, "table", "created", 201)


@blp.route("/tables/<int:table_id>")
class TableResource(MethodView):
    @jwt_required()
    def get(self, table_id):
        return item_response(tables.get_table(table_id), "table", "fetched")

    @jwt_required()
    @blp.arguments(TableUpdateSchema)
    def patch(self, table_data, table_id):
        check_staff()
        table = tables.update_table(table_id, table_data)
        return item_response(table, "table", "updated")

    @jwt_required()
    def delete(self, table_id):
        check_staff()
        tables.delete_table(table_id)
        return message_response("Table deleted successfully")


@blp.route("/available-tables")
class AvailableTables(MethodView):
    @jwt_required()
    def get(self):
        """Tables without an active order."""
        return list_response(tables.available_tables(), "table")
