from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import jwt_required

from restaurant_pos.schemas import OrderItemSchema, OrderItemUpdateSchema
from restaurant_pos.services import order_items
from restaurant_pos.services.helper import item_response, list_response
from restaurant_pos.services.permissions import current_caller
from restaurant_pos.controllers.order import line_response

blp = Blueprint("OrderItems", __name__, description="Operations on order items")


@blp.route("/orderItems")
class OrderItemList(MethodView):
    @jwt_required()
    def get(self):
        return list_response(order_items.list_all_items(current_caller()), "order_item")

    @jwt_required()
    @blp.arguments(OrderItemSchema)
    def post(self, item_data):
        item = order_items.add_item(current_caller(), item_data["order_id"], item_data)
        return line_response(item, "added", 201)


@blp.route("/orderItems/<int:order_item_id>")
class OrderItemResource(MethodView):
    @jwt_required()
    def get(self, order_item_id):
        item = order_items.get_item(current_caller(), order_item_id)
        return item_response(item, "order_item", "fetched")

    @jwt_required()
    @blp.arguments(OrderItemUpdateSchema)
    def patch(self, item_data, order_item_id):
        item = order_items.update_item(current_caller(), order_item_id, item_data)
        return line_response(item, "updated")

    @jwt_required()
    def delete(self, order_item_id):
        order = order_items.remove_item(current_caller(), order_item_id)
        return {
            "order": order.to_dict(),
            "message": "Order item deleted successfully",
            "status": 200
        }, 200
