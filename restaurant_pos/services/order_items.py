"""
Order Lifecycle Manager: line items.

Every mutation holds the order's lock scope and one transaction that row
locks the order, changes the items and recomputes the total.
"""
import logging

from restaurant_pos import db
from restaurant_pos.errors import (
    FoodNotFound, Forbidden, OrderItemNotFound, OrderNotModifiable
)
from restaurant_pos.models import Food, OrderItem
from restaurant_pos.services.helper import check_identifier
from restaurant_pos.services.locks import order_lock
from restaurant_pos.services.orders import lock_order_row, view_order
from restaurant_pos.services.permissions import MANAGE, MUTATE_ITEMS, VIEW, authorize
from restaurant_pos.services.reconciler import recompute_order_total
from restaurant_pos.services.storage import transaction

logger = logging.getLogger(__name__)


def _get_item(item_id):
    item = db.session.get(OrderItem, item_id)
    if item is None:
        raise OrderItemNotFound()
    return item


def _reload_item(item_id):
    item = OrderItem.query.filter_by(id=item_id).populate_existing().first()
    if item is None:
        raise OrderItemNotFound()
    return item


def _require_food(food_id):
    if db.session.get(Food, food_id) is None:
        raise FoodNotFound("The food referenced does not exist")


def _open_order_for(caller, order_id):
    """Row lock the order and check the caller may change its items."""
    order = lock_order_row(order_id)
    authorize(caller, MUTATE_ITEMS, order.user_id,
              "You don't have permission to modify this order")
    if not order.is_mutable:
        raise OrderNotModifiable(
            f"Items cannot be changed while the order is '{order.status}'.")
    return order


def _find_line(order_id, food_id):
    return (
        OrderItem.query
        .filter_by(order_id=order_id, food_id=food_id)
        .populate_existing()
        .first()
    )


def get_item(caller, item_id):
    item = _get_item(item_id)
    authorize(caller, VIEW, item.order.user_id,
              "You don't have permission to view this order item")
    return item


def list_items_for_order(caller, order_id):
    order = view_order(caller, order_id)
    return order.items.order_by(OrderItem.id).all()


def list_all_items(caller):
    authorize(caller, MANAGE, message="You don't have permission to access this resource")
    return OrderItem.query.order_by(OrderItem.id).all()


def add_item(caller, order_id, data):
    """Add ``quantity`` of a food to an order.

    A food already on the order is merged into its existing line, so an
    order never carries two lines for the same food.
    """
    food_id = data["food_id"]
    quantity = data["quantity"]

    with order_lock(order_id):
        with transaction():
            order = _open_order_for(caller, order_id)
            _require_food(food_id)

            item = _find_line(order.id, food_id)
            if item is None:
                item = OrderItem(order_id=order.id, food_id=food_id, quantity=quantity)
                db.session.add(item)
            else:
                item.quantity += quantity
            recompute_order_total(order)

    logger.info(f"Food {food_id} x{quantity} added to order {order_id}", extra={
        'event': 'order_item_added',
        'order_id': order_id,
        'food_id': food_id
    })
    return item


def update_item(caller, item_id, data):
    """Change the quantity, or for staff the food, of one line."""
    check_identifier(data, "order_item_id", item_id)
    order_id = _get_item(item_id).order_id

    with order_lock(order_id):
        with transaction():
            order = _open_order_for(caller, order_id)
            item = _reload_item(item_id)

            quantity = data.get("quantity") or item.quantity
            food_id = data.get("food_id") or item.food_id

            if food_id != item.food_id:
                if not caller.is_staff:
                    raise Forbidden("Only staff can change the food of an order item")
                _require_food(food_id)
                existing = _find_line(order.id, food_id)
                if existing is not None:
                    # Fold into the line that already carries this food
                    existing.quantity += quantity
                    db.session.delete(item)
                    item = existing
                else:
                    item.food_id = food_id
                    item.quantity = quantity
            else:
                item.quantity = quantity
            recompute_order_total(order)

    logger.info(f"Order item {item_id} updated on order {order_id}", extra={
        'event': 'order_item_updated',
        'order_id': order_id
    })
    return item


def remove_item(caller, item_id):
    """Remove one line and return the order with its new total."""
    order_id = _get_item(item_id).order_id

    with order_lock(order_id):
        with transaction():
            order = _open_order_for(caller, order_id)
            item = _reload_item(item_id)
            db.session.delete(item)
            recompute_order_total(order)

    logger.info(f"Order item {item_id} removed from order {order_id}", extra={
        'event': 'order_item_removed',
        'order_id': order_id
    })
    return order
