"""
Table Occupancy Guard.

A table is occupied while any order referencing it has a status outside
the terminal set {completed, cancelled}. The guard is a point check; the
callers that act on its answer hold the table's lock scope and a row lock
for the whole check-and-insert window.
"""
from restaurant_pos import db
from restaurant_pos.errors import TableInUse, TableNotFound, TableOccupied
from restaurant_pos.models import Order, Table, TERMINAL_ORDER_STATUSES
from restaurant_pos.services.helper import (
    create_logic, delete_logic, get_item_by_id_logic, update_logic
)


def _active_orders(table_id, exclude_order_id=None):
    query = Order.query.filter(
        Order.table_id == table_id,
        Order.status.notin_(TERMINAL_ORDER_STATUSES)
    )
    if exclude_order_id is not None:
        query = query.filter(Order.id != exclude_order_id)
    return query


def table_is_available(table_id, exclude_order_id=None):
    return not db.session.query(
        _active_orders(table_id, exclude_order_id).exists()
    ).scalar()


def assert_creatable(table_id, exclude_order_id=None):
    """Lock the table row and make sure a new order may be seated on it."""
    table = (
        Table.query
        .filter_by(id=table_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if table is None:
        raise TableNotFound("The table referenced does not exist")
    if not table_is_available(table_id, exclude_order_id):
        raise TableOccupied()
    return table


def available_tables():
    occupied = (
        db.session.query(Order.table_id)
        .filter(Order.status.notin_(TERMINAL_ORDER_STATUSES))
        .distinct()
    )
    return Table.query.filter(Table.id.notin_(occupied)).order_by(Table.id).all()


def get_table(table_id):
    return get_item_by_id_logic(Table, table_id, TableNotFound)


def delete_table(table_id):
    """Delete a table that no order has ever referenced."""
    table = get_table(table_id)
    if Order.query.filter_by(table_id=table_id).count() > 0:
        raise TableInUse()
    delete_logic(table)


def create_table(data):
    return create_logic(Table, data)


def update_table(table_id, data):
    table = get_table(table_id)
    return update_logic(table, data, "table_id", table_id)
