from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import jwt_required

from restaurant_pos.schemas import InvoiceSchema, InvoiceUpdateSchema
from restaurant_pos.services import invoices
from restaurant_pos.services.helper import item_response, list_response, message_response
from restaurant_pos.services.permissions import current_caller

blp = Blueprint("Invoices", __name__, description="Operations on invoices")


@blp.route("/invoices")
class InvoiceList(MethodView):
    @jwt_required()
    def get(self):
        return list_response(invoices.list_invoices(current_caller()), "invoice")

    @jwt_required()
    @blp.arguments(InvoiceSchema)
    def post(self, invoice_data):
        """Invoice an order and move it to 'invoiced' when it is still open."""
        invoice = invoices.create_invoice(current_caller(), invoice_data)
        return item_response(invoice, "invoice", "created", 201)


@blp.route("/invoices/<int:invoice_id>")
class InvoiceResource(MethodView):
    @jwt_required()
    def get(self, invoice_id):
        invoice = invoices.view_invoice(current_caller(), invoice_id)
        return item_response(invoice, "invoice", "fetched")

    @jwt_required()
    @blp.arguments(InvoiceUpdateSchema)
    def patch(self, invoice_data, invoice_id):
        invoice = invoices.update_invoice(current_caller(), invoice_id, invoice_data)
        return item_response(invoice, "invoice", "updated")

    @jwt_required()
    def delete(self, invoice_id):
        invoices.delete_invoice(current_caller(), invoice_id)
        return message_response("Invoice deleted successfully")


@blp.route("/user-invoices")
class UserInvoices(MethodView):
    @jwt_required()
    def get(self):
        return list_response(invoices.list_user_invoices(current_caller()), "invoice")
