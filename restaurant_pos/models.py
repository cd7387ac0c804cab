from restaurant_pos import db
from datetime import datetime


ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"
ROLES = (ROLE_ADMIN, ROLE_USER)

ORDER_PENDING = "pending"
ORDER_DRAFT = "draft"
ORDER_INVOICED = "invoiced"
ORDER_COMPLETED = "completed"
ORDER_CANCELLED = "cancelled"
ORDER_STATUSES = (ORDER_PENDING, ORDER_DRAFT, ORDER_INVOICED,
                  ORDER_COMPLETED, ORDER_CANCELLED)

# Items may only change while an order is in one of these
MUTABLE_ORDER_STATUSES = (ORDER_PENDING, ORDER_DRAFT)
# Orders in these statuses no longer occupy their table
TERMINAL_ORDER_STATUSES = (ORDER_COMPLETED, ORDER_CANCELLED)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"


def _money(value):
    return float(value) if value is not None else None


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), nullable=False, unique=True)
    phone = db.Column(db.String(20), nullable=False, unique=True)
    password = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(10), nullable=False, default=ROLE_USER)

    # Current token pair, overwritten on every login and refresh
    token = db.Column(db.Text, nullable=True)
    refresh_token = db.Column(db.Text, nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_staff(self):
        return self.role == ROLE_ADMIN

    def to_dict(self):
        return {
            "user_id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Table(db.Model):
    __tablename__ = 'tables'

    id = db.Column(db.Integer, primary_key=True)
    table_name = db.Column(db.String(100), nullable=False)
    number_of_guests = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = db.relationship("Order", back_populates="table", lazy="dynamic")

    def to_dict(self):
        return {
            "table_id": self.id,
            "table_name": self.table_name,
            "number_of_guests": self.number_of_guests,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Menu(db.Model):
    __tablename__ = 'menus'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    start_date = db.Column(db.DateTime, nullable=True)
    end_date = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    foods = db.relationship("Food", back_populates="menu", lazy="dynamic")

    def to_dict(self):
        return {
            "menu_id": self.id,
            "name": self.name,
            "category": self.category,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Food(db.Model):
    __tablename__ = 'foods'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    food_image = db.Column(db.String(255), nullable=True)
    menu_id = db.Column(db.Integer, db.ForeignKey('menus.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    menu = db.relationship("Menu", back_populates="foods")

    def to_dict(self):
        return {
            "food_id": self.id,
            "name": self.name,
            "price": _money(self.price),
            "food_image": self.food_image,
            "menu_id": self.menu_id,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    # Null for orders placed by staff without a customer account
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey('tables.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=ORDER_PENDING, index=True)
    total = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    order_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    table = db.relationship("Table", back_populates="orders")
    items = db.relationship("OrderItem", back_populates="order", lazy="dynamic")
    invoice = db.relationship("Invoice", back_populates="order", uselist=False)

    @property
    def is_mutable(self):
        return self.status in MUTABLE_ORDER_STATUSES

    @property
    def is_terminal(self):
        return self.status in TERMINAL_ORDER_STATUSES

    def to_dict(self):
        return {
            "order_id": self.id,
            "user_id": self.user_id,
            "table_id": self.table_id,
            "order_status": self.status,
            "order_total": _money(self.total),
            "order_date": _iso(self.order_date),
            "updated_at": _iso(self.updated_at),
        }


class OrderItem(db.Model):
    __tablename__ = 'order_items'
    __table_args__ = (
        db.UniqueConstraint('order_id', 'food_id', name='uq_order_items_order_food'),
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    food_id = db.Column(db.Integer, db.ForeignKey('foods.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = db.relationship("Order", back_populates="items")
    food = db.relationship("Food")

    def to_dict(self):
        return {
            "order_item_id": self.id,
            "order_id": self.order_id,
            "food_id": self.food_id,
            "quantity": self.quantity,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Invoice(db.Model):
    __tablename__ = 'invoices'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, unique=True)
    payment_method = db.Column(db.String(50), nullable=True)
    payment_status = db.Column(db.String(20), nullable=False, default=PAYMENT_PENDING)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_due_date = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = db.relationship("Order", back_populates="invoice")

    @property
    def is_paid(self):
        return self.payment_status == PAYMENT_PAID

    def to_dict(self):
        return {
            "invoice_id": self.id,
            "order_id": self.order_id,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "total_amount": _money(self.total_amount),
            "payment_due_date": _iso(self.payment_due_date),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class TokenBlocklist(db.Model):
    __tablename__ = "token_blocklist"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), nullable=False, unique=True)
    created_at = db.Column(
        db.DateTime, default=datetime.utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
