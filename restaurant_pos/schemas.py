from marshmallow import (
    Schema,
    fields,
    validate,
    ValidationError,
    validates_schema
)

from restaurant_pos.models import ROLES, ORDER_STATUSES


PHONE_PATTERN = r"^\+?\d{10,15}$"


class SignupSchema(Schema):
    first_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=100))
    phone = fields.Str(
        required=True,
        validate=validate.Regexp(
            PHONE_PATTERN,
            error="Invalid phone number. Use 10 to 15 digits, optionally prefixed with '+'."
        )
    )
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=8))
    # Only honoured when an admin registers the account
    role = fields.Str(validate=validate.OneOf(ROLES))


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)


class RefreshTokenSchema(Schema):
    refresh_token = fields.Str(required=True)


class TableSchema(Schema):
    table_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    number_of_guests = fields.Int(load_default=1, validate=validate.Range(min=1))


class TableUpdateSchema(Schema):
    table_id = fields.Int(required=True)
    table_name = fields.Str(validate=validate.Length(min=1, max=100))
    number_of_guests = fields.Int(validate=validate.Range(min=1))


class MenuSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    category = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    start_date = fields.DateTime(allow_none=True)
    end_date = fields.DateTime(allow_none=True)

    @validates_schema
    def validate_dates(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and end < start:
            raise ValidationError("End date must not be before start date.", "end_date")


class MenuUpdateSchema(MenuSchema):
    menu_id = fields.Int(required=True)
    name = fields.Str(validate=validate.Length(min=1, max=100))
    category = fields.Str(validate=validate.Length(min=1, max=100))


class FoodSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0))
    food_image = fields.Str(allow_none=True, validate=validate.Length(max=255))
    menu_id = fields.Int(required=True)


class FoodUpdateSchema(Schema):
    food_id = fields.Int(required=True)
    name = fields.Str(validate=validate.Length(min=1, max=100))
    price = fields.Decimal(places=2, validate=validate.Range(min=0))
    food_image = fields.Str(allow_none=True, validate=validate.Length(max=255))
    menu_id = fields.Int()


class FoodQuerySchema(Schema):
    menu_id = fields.Int()


class FoodSearchSchema(Schema):
    q = fields.Str(required=True, validate=validate.Length(min=1))


class OrderCreateSchema(Schema):
    table_id = fields.Int(required=True)
    # Staff may order on behalf of a customer, or for a walk-in
    user_id = fields.Int(allow_none=True)


class OrderUpdateSchema(Schema):
    order_id = fields.Int(required=True)
    user_id = fields.Int(allow_none=True)
    table_id = fields.Int()
    status = fields.Str(validate=validate.OneOf(ORDER_STATUSES))


class OrderItemAddSchema(Schema):
    food_id = fields.Int(required=True)
    quantity = fields.Int(required=True, validate=validate.Range(min=1))


class OrderItemSchema(OrderItemAddSchema):
    order_id = fields.Int(required=True)


class OrderItemUpdateSchema(Schema):
    order_item_id = fields.Int(required=True)
    quantity = fields.Int(validate=validate.Range(min=1))
    food_id = fields.Int()


class InvoiceSchema(Schema):
    order_id = fields.Int(required=True)
    payment_method = fields.Str(allow_none=True, validate=validate.Length(max=50))
    payment_status = fields.Str(validate=validate.Length(min=1, max=20))
    total_amount = fields.Decimal(allow_none=True, places=2, validate=validate.Range(min=0))
    payment_due_date = fields.DateTime(allow_none=True)


class InvoiceUpdateSchema(Schema):
    invoice_id = fields.Int(required=True)
    payment_method = fields.Str(allow_none=True, validate=validate.Length(max=50))
    payment_status = fields.Str(validate=validate.Length(min=1, max=20))
    total_amount = fields.Decimal(places=2, validate=validate.Range(min=0))
    payment_due_date = fields.DateTime()
