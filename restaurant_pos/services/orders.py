"""
Order Lifecycle Manager: order records.

Statuses move pending <-> draft -> invoiced -> completed | cancelled.
pending and draft are the editable states; invoiced, completed and
cancelled are progressively more final. Line-item changes live in
``order_items``.
"""
import logging
from contextlib import ExitStack
from datetime import datetime

from restaurant_pos import db
from restaurant_pos.errors import (
    HasDependentInvoice, InvalidStatusTransition, OrderNotFound, UserNotFound
)
from restaurant_pos.models import (
    Invoice, Order, OrderItem, User,
    ORDER_PENDING, ORDER_DRAFT, ORDER_INVOICED, ORDER_COMPLETED, ORDER_CANCELLED,
)
from restaurant_pos.services.locks import order_lock, table_lock
from restaurant_pos.services.permissions import MANAGE, VIEW, authorize
from restaurant_pos.services.helper import check_identifier
from restaurant_pos.services.storage import transaction
from restaurant_pos.services.tables import assert_creatable, get_table

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ORDER_PENDING: {ORDER_PENDING, ORDER_DRAFT, ORDER_INVOICED, ORDER_COMPLETED, ORDER_CANCELLED},
    ORDER_DRAFT: {ORDER_PENDING, ORDER_DRAFT, ORDER_INVOICED, ORDER_COMPLETED, ORDER_CANCELLED},
    ORDER_INVOICED: {ORDER_INVOICED, ORDER_COMPLETED, ORDER_CANCELLED},
    ORDER_COMPLETED: {ORDER_COMPLETED},
    ORDER_CANCELLED: {ORDER_CANCELLED},
}


def can_transition(current, requested):
    return requested in ALLOWED_TRANSITIONS.get(current, ())


def check_transition(current, requested):
    if not can_transition(current, requested):
        raise InvalidStatusTransition(
            f"An order cannot move from '{current}' to '{requested}'.")


def get_order(order_id):
    order = db.session.get(Order, order_id)
    if order is None:
        raise OrderNotFound()
    return order


def lock_order_row(order_id):
    """Load the order with a row lock, bypassing any stale identity-map copy."""
    order = (
        Order.query
        .filter_by(id=order_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if order is None:
        raise OrderNotFound()
    return order


def _require_user(user_id):
    if user_id is not None and db.session.get(User, user_id) is None:
        raise UserNotFound("The user referenced does not exist")


def view_order(caller, order_id):
    order = get_order(order_id)
    authorize(caller, VIEW, order.user_id,
              "You don't have permission to view this order")
    return order


def list_orders(caller):
    authorize(caller, MANAGE, message="You don't have permission to access this resource")
    return Order.query.order_by(Order.id).all()


def list_user_orders(caller):
    return Order.query.filter_by(user_id=caller.user_id).order_by(Order.id).all()


def create_order(caller, data):
    """Seat a new pending order on a free table.

    Customers always own the orders they place. Staff may name the customer
    they are ordering for, or leave the order without an owner.
    """
    table_id = data["table_id"]
    if caller.is_staff:
        user_id = data.get("user_id")
        _require_user(user_id)
    else:
        user_id = caller.user_id

    with table_lock(table_id):
        with transaction():
            assert_creatable(table_id)
            order = Order(
                user_id=user_id,
                table_id=table_id,
                status=ORDER_PENDING,
                total=0,
                order_date=datetime.utcnow(),
            )
            db.session.add(order)

    logger.info(f"Order {order.id} created on table {table_id}", extra={
        'event': 'order_created',
        'order_id': order.id,
        'table_id': table_id,
        'user_id': user_id
    })
    return order


def update_order(caller, order_id, data):
    """Staff update of owner, table and status. The total is never written here."""
    authorize(caller, MANAGE, message="You don't have permission to update an order")
    check_identifier(data, "order_id", order_id)

    with ExitStack() as scopes:
        scopes.enter_context(order_lock(order_id))
        if data.get("table_id") is not None:
            scopes.enter_context(table_lock(data["table_id"]))

        with transaction():
            order = lock_order_row(order_id)
            previous_status = order.status
            status = data.get("status") or order.status
            table_id = data.get("table_id") or order.table_id

            check_transition(order.status, status)
            order.status = status
            if table_id != order.table_id:
                # A closed order no longer occupies its table
                if order.is_terminal:
                    get_table(table_id)
                else:
                    assert_creatable(table_id, exclude_order_id=order.id)
            if "user_id" in data:
                _require_user(data["user_id"])
                order.user_id = data["user_id"]

            order.table_id = table_id

    if status != previous_status:
        logger.info(f"Order {order_id} status changed: {previous_status} -> {status}", extra={
            'event': 'order_status_changed',
            'order_id': order_id,
            'status': status
        })
    return order


def delete_order(caller, order_id):
    """Delete an order and its items, unless an invoice still references it."""
    authorize(caller, MANAGE, message="You don't have permission to delete an order")

    with order_lock(order_id):
        with transaction():
            order = lock_order_row(order_id)
            if Invoice.query.filter_by(order_id=order.id).count() > 0:
                raise HasDependentInvoice()
            OrderItem.query.filter_by(order_id=order.id).delete(synchronize_session=False)
            db.session.delete(order)

    logger.info(f"Order {order_id} deleted", extra={
        'event': 'order_deleted',
        'order_id': order_id
    })
