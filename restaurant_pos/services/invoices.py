"""
Invoice Issuer.

Issuing an invoice moves a still-open order to ``invoiced`` in the same
transaction. Orders that are already invoiced or completed keep their
status; an order never moves backwards because of an invoice.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from restaurant_pos import db
from restaurant_pos.errors import (
    InvoiceAlreadyExists, InvoiceAlreadyPaid, InvoiceNotFound, OrderNotInvoiceable
)
from restaurant_pos.models import (
    Invoice, Order, ORDER_CANCELLED, ORDER_INVOICED, PAYMENT_PENDING
)
from restaurant_pos.services.helper import check_identifier
from restaurant_pos.services.locks import order_lock
from restaurant_pos.services.orders import lock_order_row
from restaurant_pos.services.permissions import MANAGE, VIEW, authorize
from restaurant_pos.services.storage import transaction

logger = logging.getLogger(__name__)

PAYMENT_TERM = timedelta(days=7)
INVOICE_FIELDS = ("payment_method", "payment_status", "total_amount", "payment_due_date")


def get_invoice(invoice_id):
    invoice = db.session.get(Invoice, invoice_id)
    if invoice is None:
        raise InvoiceNotFound()
    return invoice


def lock_invoice_row(invoice_id):
    invoice = (
        Invoice.query
        .filter_by(id=invoice_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if invoice is None:
        raise InvoiceNotFound()
    return invoice


def view_invoice(caller, invoice_id):
    invoice = get_invoice(invoice_id)
    authorize(caller, VIEW, invoice.order.user_id,
              "You don't have permission to view this invoice")
    return invoice


def list_invoices(caller):
    authorize(caller, MANAGE, message="You don't have permission to access this resource")
    return Invoice.query.order_by(Invoice.id).all()


def list_user_invoices(caller):
    return (
        Invoice.query
        .join(Order, Order.id == Invoice.order_id)
        .filter(Order.user_id == caller.user_id)
        .order_by(Invoice.id)
        .all()
    )


def create_invoice(caller, data):
    """Issue the invoice of an order.

    Missing fields default to a pending payment, the order's current total
    and a due date one week out.
    """
    authorize(caller, MANAGE, message="You don't have permission to create an invoice")
    order_id = data["order_id"]

    with order_lock(order_id):
        with transaction():
            order = lock_order_row(order_id)
            if order.status == ORDER_CANCELLED:
                raise OrderNotInvoiceable()
            if Invoice.query.filter_by(order_id=order.id).count() > 0:
                raise InvoiceAlreadyExists()

            total_amount = data.get("total_amount")
            if not total_amount:
                total_amount = order.total or Decimal("0")

            invoice = Invoice(
                order_id=order.id,
                payment_method=data.get("payment_method"),
                payment_status=data.get("payment_status") or PAYMENT_PENDING,
                total_amount=total_amount,
                payment_due_date=data.get("payment_due_date") or datetime.utcnow() + PAYMENT_TERM,
            )
            db.session.add(invoice)

            if order.is_mutable:
                order.status = ORDER_INVOICED

    logger.info(f"Invoice {invoice.id} issued for order {order_id}", extra={
        'event': 'invoice_issued',
        'invoice_id': invoice.id,
        'order_id': order_id
    })
    return invoice


def update_invoice(caller, invoice_id, data):
    authorize(caller, MANAGE, message="You don't have permission to update an invoice")
    check_identifier(data, "invoice_id", invoice_id)
    order_id = get_invoice(invoice_id).order_id

    with order_lock(order_id):
        with transaction():
            invoice = lock_invoice_row(invoice_id)
            for field in INVOICE_FIELDS:
                if field in data and data[field] is not None:
                    setattr(invoice, field, data[field])
    return invoice


def delete_invoice(caller, invoice_id):
    """Delete an unpaid invoice. Payment is checked under the order's lock."""
    authorize(caller, MANAGE, message="You don't have permission to delete an invoice")
    order_id = get_invoice(invoice_id).order_id

    with order_lock(order_id):
        with transaction():
            invoice = lock_invoice_row(invoice_id)
            if invoice.is_paid:
                raise InvoiceAlreadyPaid()
            db.session.delete(invoice)

    logger.info(f"Invoice {invoice_id} deleted", extra={
        'event': 'invoice_deleted',
        'invoice_id': invoice_id
    })
