from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import jwt_required

from restaurant_pos.schemas import OrderCreateSchema, OrderItemAddSchema, OrderUpdateSchema
from restaurant_pos.services import order_items, orders
from restaurant_pos.services.helper import item_response, list_response, message_response
from restaurant_pos.services.permissions import current_caller

blp = Blueprint("Orders", __name__, description="Operations on orders")


def line_response(item, action, status=200):
    """An order item together with the order total it produced."""
    return {
        "order_item": item.to_dict(),
        "order": item.order.to_dict(),
        "message": f"Order item {action} successfully",
        "status": status
    }, status


@blp.route("/orders")
class OrderList(MethodView):
    @jwt_required()
    def get(self):
        return list_response(orders.list_orders(current_caller()), "order")

    @jwt_required()
    @blp.arguments(OrderCreateSchema)
    def post(self, order_data):
        """Open a pending order on a free table."""
        order = orders.create_order(current_caller(), order_data)
        return item_response(order, "order", "created", 201)


@blp.route("/orders/<int:order_id>")
class OrderResource(MethodView):
    @jwt_required()
    def get(self, order_id):
        order = orders.view_order(current_caller(), order_id)
        return item_response(order, "order", "fetched")

    @jwt_required()
    @blp.arguments(OrderUpdateSchema)
    def patch(self, order_data, order_id):
        order = orders.update_order(current_caller(), order_id, order_data)
        return item_response(order, "order", "updated")

    @jwt_required()
    def delete(self, order_id):
        orders.delete_order(current_caller(), order_id)
        return message_response("Order deleted successfully")


@blp.route("/user/orders")
class UserOrders(MethodView):
    @jwt_required()
    def get(self):
        """Orders placed by the caller."""
        return list_response(orders.list_user_orders(current_caller()), "order")


@blp.route("/orders/<int:order_id>/items")
class OrderItems(MethodView):
    @jwt_required()
    def get(self, order_id):
        items = order_items.list_items_for_order(current_caller(), order_id)
        return list_response(items, "order_item")

    @jwt_required()
    @blp.arguments(OrderItemAddSchema)
    def post(self, item_data, order_id):
        item = order_items.add_item(current_caller(), order_id, item_data)
        return line_response(item, "added", 201)
