"""
Order Lifecycle Manager: creation, status rules, updates, deletion and views.
"""
import pytest
from decimal import Decimal

from helpers import error_kind
from restaurant_pos import db
from restaurant_pos.errors import (
    Forbidden, HasDependentInvoice, InvalidStatusTransition, OrderNotFound, TableNotFound
)
from restaurant_pos.models import Order, OrderItem, ORDER_STATUSES
from restaurant_pos.services.invoices import create_invoice
from restaurant_pos.services.order_items import add_item
from restaurant_pos.services.orders import (
    ALLOWED_TRANSITIONS, can_transition, create_order, delete_order, update_order
)


class TestCreate:

    def test_new_order_is_pending_with_zero_total(self, table, customer, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})

        assert order.status == "pending"
        assert order.total == Decimal("0")
        assert order.user_id == customer.id
        assert order.order_date is not None

    def test_customer_always_owns_their_order(self, table, customer, other_customer, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id, "user_id": other_customer.id})
        assert order.user_id == customer.id

    def test_staff_order_for_customer_or_walk_in(self, table, second_table, customer, staff):
        for_customer = create_order(staff, {"table_id": table.id, "user_id": customer.id})
        walk_in = create_order(staff, {"table_id": second_table.id})

        assert for_customer.user_id == customer.id
        assert walk_in.user_id is None

    def test_order_endpoint(self, client, table, customer_headers):
        response = client.post("/orders", json={"table_id": table.id}, headers=customer_headers)
        body = response.get_json()

        assert response.status_code == 201
        assert body["order"]["order_status"] == "pending"
        assert body["order"]["order_total"] == 0
        assert body["message"] == "Order created successfully"


class TestStatusTransitions:

    @pytest.mark.parametrize("current,requested,allowed", [
        ("pending", "draft", True),
        ("draft", "pending", True),
        ("pending", "invoiced", True),
        ("draft", "cancelled", True),
        ("invoiced", "completed", True),
        ("invoiced", "cancelled", True),
        ("invoiced", "pending", False),
        ("invoiced", "draft", False),
        ("completed", "pending", False),
        ("completed", "cancelled", False),
        ("cancelled", "draft", False),
        ("cancelled", "completed", False),
        ("completed", "completed", True),
    ])
    def test_transition_table(self, current, requested, allowed):
        assert can_transition(current, requested) is allowed

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(ORDER_STATUSES)

    def test_rejected_transition_leaves_order_unchanged(self, table, staff, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        update_order(staff, order.id, {"order_id": order.id, "status": "completed"})

        with pytest.raises(InvalidStatusTransition):
            update_order(staff, order.id, {"order_id": order.id, "status": "pending"})
        assert db.session.get(Order, order.id).status == "completed"

    def test_invalid_transition_over_http(self, client, table, customer_caller, staff, admin_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        update_order(staff, order.id, {"order_id": order.id, "status": "cancelled"})

        response = client.patch(f"/orders/{order.id}",
                                json={"order_id": order.id, "status": "draft"},
                                headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "InvalidStatusTransition"


class TestUpdate:

    def test_only_staff_update_orders(self, table, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        with pytest.raises(Forbidden):
            update_order(customer_caller, order.id, {"order_id": order.id, "status": "draft"})

    def test_identifier_must_match(self, client, table, customer_caller, admin_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        response = client.patch(f"/orders/{order.id}",
                                json={"order_id": order.id + 1, "status": "draft"},
                                headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "IdentifierMismatch"

    def test_total_is_not_writable(self, client, table, customer_caller, admin_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        response = client.patch(f"/orders/{order.id}",
                                json={"order_id": order.id, "total": 99},
                                headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "ValidationError"
        assert db.session.get(Order, order.id).total == Decimal("0")

    def test_move_to_free_table(self, table, second_table, staff, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        moved = update_order(staff, order.id, {"order_id": order.id, "table_id": second_table.id})
        assert moved.table_id == second_table.id

    def test_move_to_occupied_table_conflicts(
            self, client, table, second_table, customer_caller, other_caller, admin_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        create_order(other_caller, {"table_id": second_table.id})

        response = client.patch(f"/orders/{order.id}",
                                json={"order_id": order.id, "table_id": second_table.id},
                                headers=admin_headers)
        assert response.status_code == 409
        assert error_kind(response) == "TableOccupied"
        assert db.session.get(Order, order.id).table_id == table.id

    def test_closing_order_may_move_onto_occupied_table(
            self, table, second_table, staff, customer_caller, other_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        create_order(other_caller, {"table_id": second_table.id})

        moved = update_order(staff, order.id, {
            "order_id": order.id, "table_id": second_table.id, "status": "completed"})

        assert moved.table_id == second_table.id
        assert moved.is_terminal

    def test_closed_order_still_needs_an_existing_table(self, table, staff, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        with pytest.raises(TableNotFound):
            update_order(staff, order.id, {"order_id": order.id, "table_id": 999, "status": "cancelled"})
        assert db.session.get(Order, order.id).status == "pending"

    def test_unknown_order(self, staff, app):
        with pytest.raises(OrderNotFound):
            update_order(staff, 12345, {"order_id": 12345, "status": "draft"})


class TestDelete:

    def test_delete_removes_items_too(self, table, food, staff, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        add_item(customer_caller, order.id, {"food_id": food.id, "quantity": 2})
        order_id = order.id

        delete_order(staff, order_id)

        assert db.session.get(Order, order_id) is None
        assert OrderItem.query.filter_by(order_id=order_id).count() == 0

    def test_invoiced_order_cannot_be_deleted(self, client, table, food, staff, customer_caller, admin_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        add_item(customer_caller, order.id, {"food_id": food.id, "quantity": 1})
        create_invoice(staff, {"order_id": order.id})

        response = client.delete(f"/orders/{order.id}", headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "HasDependentInvoice"
        assert OrderItem.query.filter_by(order_id=order.id).count() == 1

    def test_has_dependent_invoice_raised(self, table, staff, customer_caller):
        order = create_order(customer_caller, {"table_id": table.id})
        create_invoice(staff, {"order_id": order.id})
        with pytest.raises(HasDependentInvoice):
            delete_order(staff, order.id)

    def test_customers_cannot_delete(self, client, table, customer_caller, customer_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        response = client.delete(f"/orders/{order.id}", headers=customer_headers)
        assert response.status_code == 403


class TestViews:

    def test_owner_and_staff_can_view(self, client, table, customer_caller, customer_headers, admin_headers):
        order = create_order(customer_caller, {"table_id": table.id})

        assert client.get(f"/orders/{order.id}", headers=customer_headers).status_code == 200
        assert client.get(f"/orders/{order.id}", headers=admin_headers).status_code == 200

    def test_other_customer_is_forbidden(self, client, table, customer_caller, other_headers):
        order = create_order(customer_caller, {"table_id": table.id})
        response = client.get(f"/orders/{order.id}", headers=other_headers)
        assert response.status_code == 403
        assert error_kind(response) == "Forbidden"

    def test_missing_order(self, client, admin_headers):
        response = client.get("/orders/777", headers=admin_headers)
        assert response.status_code == 404
        assert error_kind(response) == "OrderNotFound"

    def test_order_listings(self, client, table, second_table, customer_caller, other_caller,
                            customer_headers, admin_headers):
        mine = create_order(customer_caller, {"table_id": table.id})
        create_order(other_caller, {"table_id": second_table.id})

        assert client.get("/orders", headers=customer_headers).status_code == 403
        assert len(client.get("/orders", headers=admin_headers).get_json()["orders"]) == 2

        own = client.get("/user/orders", headers=customer_headers).get_json()["orders"]
        assert [o["order_id"] for o in own] == [mine.id]
