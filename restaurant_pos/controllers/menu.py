from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import jwt_required

from restaurant_pos.models import Menu
from restaurant_pos.schemas import MenuSchema, MenuUpdateSchema
from restaurant_pos.services import catalogue
from restaurant_pos.services.helper import (
    get_all_item_logic, item_response, list_response, message_response
)
from restaurant_pos.controllers.table import check_staff

blp = Blueprint("Menus", __name__, description="Operations on menus")


@blp.route("/menus")
class MenuList(MethodView):
    @jwt_required()
    def get(self):
        return list_response(get_all_item_logic(Menu), "menu")

    @jwt_required()
    @blp.arguments(MenuSchema)
    def post(self, menu_data):
        check_staff()
        menu = catalogue.create_menu(menu_data)
        return item_response(menu, "menu", "created", 201)


@blp.route("/menus/<int:menu_id>")
class MenuResource(MethodView):
    @jwt_required()
    def get(self, menu_id):
        return item_response(catalogue.get_menu(menu_id), "menu", "fetched")

    @jwt_required()
    @blp.arguments(MenuUpdateSchema)
    def patch(self, menu_data, menu_id):
        check_staff()
        menu = catalogue.update_menu(menu_id, menu_data)
        return item_response(menu, "menu", "updated")

    @jwt_required()
    def delete(self, menu_id):
        check_staff()
        catalogue.delete_menu(menu_id)
        return message_response("Menu deleted successfully")


@blp.route("/menu-categories")
class MenuCategories(MethodView):
    @jwt_required()
    def get(self):
        return {
            "categories": catalogue.menu_categories(),
            "message": "all menu categories fetched successfully",
            "status": 200
        }, 200
