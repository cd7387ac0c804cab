"""
Invoice Issuer.
"""
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from sqlalchemy.orm.attributes import set_committed_value

from helpers import error_kind
from restaurant_pos import db
from restaurant_pos.errors import Forbidden, InvoiceAlreadyExists, InvoiceAlreadyPaid, OrderNotFound
from restaurant_pos.models import Invoice, Order
from restaurant_pos.services.invoices import create_invoice, delete_invoice, update_invoice
from restaurant_pos.services.order_items import add_item
from restaurant_pos.services.orders import create_order, update_order


@pytest.fixture
def order(table, food, customer_caller):
    order = create_order(customer_caller, {"table_id": table.id})
    add_item(customer_caller, order.id, {"food_id": food.id, "quantity": 3})
    return order


class TestCreate:

    def test_defaults(self, order, staff):
        before = datetime.utcnow()
        invoice = create_invoice(staff, {"order_id": order.id})

        assert invoice.payment_status == "pending"
        assert invoice.total_amount == Decimal("15.00")
        assert before + timedelta(days=7) <= invoice.payment_due_date
        assert invoice.payment_due_date <= datetime.utcnow() + timedelta(days=7)
        assert db.session.get(Order, order.id).status == "invoiced"

    def test_zero_amount_falls_back_to_order_total(self, order, staff):
        invoice = create_invoice(staff, {"order_id": order.id, "total_amount": Decimal("0")})
        assert invoice.total_amount == Decimal("15.00")

    def test_explicit_fields_are_kept(self, order, staff):
        due = datetime(2030, 1, 31, 12, 0)
        invoice = create_invoice(staff, {
            "order_id": order.id,
            "payment_method": "card",
            "payment_status": "paid",
            "total_amount": Decimal("12.00"),
            "payment_due_date": due,
        })

        assert invoice.payment_method == "card"
        assert invoice.is_paid
        assert invoice.total_amount == Decimal("12.00")
        assert invoice.payment_due_date == due

    def test_completed_order_is_not_moved_back(self, order, staff):
        update_order(staff, order.id, {"order_id": order.id, "status": "completed"})
        create_invoice(staff, {"order_id": order.id})
        assert db.session.get(Order, order.id).status == "completed"

    def test_cancelled_order_cannot_be_invoiced(self, client, order, staff, admin_headers):
        update_order(staff, order.id, {"order_id": order.id, "status": "cancelled"})

        response = client.post("/invoices", json={"order_id": order.id}, headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "OrderNotInvoiceable"

    def test_second_invoice_conflicts(self, order, staff):
        create_invoice(staff, {"order_id": order.id})
        with pytest.raises(InvoiceAlreadyExists):
            create_invoice(staff, {"order_id": order.id})
        assert Invoice.query.filter_by(order_id=order.id).count() == 1

    def test_missing_order(self, staff, app):
        with pytest.raises(OrderNotFound):
            create_invoice(staff, {"order_id": 4242})

    def test_customers_cannot_invoice(self, client, order, customer_caller, customer_headers):
        with pytest.raises(Forbidden):
            create_invoice(customer_caller, {"order_id": order.id})

        response = client.post("/invoices", json={"order_id": order.id}, headers=customer_headers)
        assert response.status_code == 403
        assert db.session.get(Order, order.id).status == "pending"

    def test_create_over_http(self, client, order, admin_headers):
        response = client.post("/invoices", json={"order_id": order.id}, headers=admin_headers)
        body = response.get_json()

        assert response.status_code == 201
        assert body["invoice"]["total_amount"] == 15.0
        assert body["invoice"]["payment_status"] == "pending"


class TestUpdateAndDelete:

    def test_update_fields(self, order, staff):
        invoice = create_invoice(staff, {"order_id": order.id})
        updated = update_invoice(staff, invoice.id, {
            "invoice_id": invoice.id,
            "payment_method": "cash",
            "payment_status": "paid",
        })
        assert updated.payment_method == "cash"
        assert updated.is_paid

    def test_update_requires_matching_identifier(self, client, order, staff, admin_headers):
        invoice = create_invoice(staff, {"order_id": order.id})
        response = client.patch(f"/invoices/{invoice.id}",
                                json={"invoice_id": invoice.id + 1, "payment_status": "paid"},
                                headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "IdentifierMismatch"

    def test_paid_invoice_cannot_be_deleted(self, client, order, staff, admin_headers):
        invoice = create_invoice(staff, {"order_id": order.id, "payment_status": "paid"})

        response = client.delete(f"/invoices/{invoice.id}", headers=admin_headers)
        assert response.status_code == 400
        assert error_kind(response) == "InvoiceAlreadyPaid"

    def test_payment_is_checked_against_the_stored_row(self, order, staff):
        """A stale in-session copy that still reads pending does not allow deletion."""
        invoice = create_invoice(staff, {"order_id": order.id, "payment_status": "paid"})
        invoice_id = invoice.id
        assert invoice.is_paid
        set_committed_value(invoice, "payment_status", "pending")

        with pytest.raises(InvoiceAlreadyPaid):
            delete_invoice(staff, invoice_id)

        assert db.session.get(Invoice, invoice_id) is not None

    def test_delete_keeps_order_status(self, order, staff):
        invoice = create_invoice(staff, {"order_id": order.id})
        invoice_id = invoice.id

        delete_invoice(staff, invoice_id)

        assert db.session.get(Invoice, invoice_id) is None
        assert db.session.get(Order, order.id).status == "invoiced"


class TestViews:

    def test_owner_staff_and_strangers(self, client, order, staff, customer_headers,
                                       other_headers, admin_headers):
        invoice = create_invoice(staff, {"order_id": order.id})

        assert client.get(f"/invoices/{invoice.id}", headers=customer_headers).status_code == 200
        assert client.get(f"/invoices/{invoice.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/invoices/{invoice.id}", headers=other_headers).status_code == 403

    def test_listings(self, client, order, staff, customer_headers, other_headers, admin_headers):
        invoice = create_invoice(staff, {"order_id": order.id})

        assert client.get("/invoices", headers=customer_headers).status_code == 403
        assert len(client.get("/invoices", headers=admin_headers).get_json()["invoices"]) == 1

        own = client.get("/user-invoices", headers=customer_headers).get_json()["invoices"]
        assert [i["invoice_id"] for i in own] == [invoice.id]
        assert client.get("/user-invoices", headers=other_headers).get_json()["invoices"] == []
