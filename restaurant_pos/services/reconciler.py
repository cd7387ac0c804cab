"""
Order Total Reconciler.

``order.total`` is always recomputed from the order's current line items,
never adjusted incrementally. Callers run it inside the same transaction
as the item mutation, so the item change and the new total commit or roll
back together.
"""
import logging
from decimal import Decimal

from sqlalchemy import func

from restaurant_pos import db
from restaurant_pos.models import Food, Order, OrderItem, MUTABLE_ORDER_STATUSES
from restaurant_pos.middleware.utils import log_function_call

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def order_total(order_id):
    """Sum of quantity x price over the order's current items."""
    total = (
        db.session.query(func.coalesce(func.sum(OrderItem.quantity * Food.price), 0))
        .join(Food, Food.id == OrderItem.food_id)
        .filter(OrderItem.order_id == order_id)
        .scalar()
    )
    return Decimal(str(total)).quantize(CENT)


def recompute_order_total(order):
    # Pending item changes must be visible to the aggregate
    db.session.flush()
    previous = order.total
    order.total = order_total(order.id)
    logger.info(f"Order {order.id} total reconciled: {previous} -> {order.total}", extra={
        'event': 'order_total_reconciled',
        'order_id': order.id
    })
    return order.total


def open_order_ids_for_food(food_id):
    """Ids of the still-editable orders that contain ``food_id``."""
    rows = (
        db.session.query(Order.id)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .filter(
            OrderItem.food_id == food_id,
            Order.status.in_(MUTABLE_ORDER_STATUSES)
        )
        .distinct()
        .all()
    )
    return sorted(row.id for row in rows)


@log_function_call
def reconcile_orders(order_ids):
    """Recompute the totals of ``order_ids`` inside the caller's transaction.

    The caller holds each order's lock. Orders that were invoiced or closed
    in the meantime keep the total they were billed with.
    """
    for order_id in order_ids:
        order = (
            Order.query
            .filter_by(id=order_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if order is not None and order.is_mutable:
            recompute_order_total(order)
    return len(order_ids)
