"""
Shared fixtures: an app on TestingConfig with a fresh in-memory database,
an admin and two customers, a couple of tables and a small menu.
"""
import pytest
from decimal import Decimal

from restaurant_pos import create_app, db
from restaurant_pos.config import TestingConfig
from restaurant_pos.models import Food, Menu, Table, ROLE_ADMIN, ROLE_USER
from restaurant_pos.services.permissions import Caller
from restaurant_pos.services.users import CredentialStore

PASSWORD = "password123"


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, phone, role=ROLE_USER, first_name="Test"):
    return CredentialStore().create({
        "first_name": first_name,
        "last_name": "User",
        "email": email,
        "phone": phone,
        "password": PASSWORD,
        "role": role,
    })


@pytest.fixture
def admin(app):
    return make_user("admin@example.com", "+10000000001", ROLE_ADMIN, "Admin")


@pytest.fixture
def customer(app):
    return make_user("customer@example.com", "+10000000002", first_name="Cora")


@pytest.fixture
def other_customer(app):
    return make_user("other@example.com", "+10000000003", first_name="Otto")


@pytest.fixture
def staff(admin):
    return Caller(admin.id, ROLE_ADMIN)


@pytest.fixture
def customer_caller(customer):
    return Caller(customer.id, ROLE_USER)


@pytest.fixture
def other_caller(other_customer):
    return Caller(other_customer.id, ROLE_USER)


@pytest.fixture
def login(client):
    """Log in through the API and return the Authorization header."""
    def _login(user):
        response = client.post("/users/login", json={"email": user.email, "password": PASSWORD})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['access_token']}"}
    return _login


@pytest.fixture
def admin_headers(login, admin):
    return login(admin)


@pytest.fixture
def customer_headers(login, customer):
    return login(customer)


@pytest.fixture
def other_headers(login, other_customer):
    return login(other_customer)


@pytest.fixture
def table(app):
    table = Table(table_name="Window 1", number_of_guests=2)
    db.session.add(table)
    db.session.commit()
    return table


@pytest.fixture
def second_table(app):
    table = Table(table_name="Patio 2", number_of_guests=4)
    db.session.add(table)
    db.session.commit()
    return table


@pytest.fixture
def menu(app):
    menu = Menu(name="Lunch", category="Mains")
    db.session.add(menu)
    db.session.commit()
    return menu


@pytest.fixture
def food(menu):
    food = Food(name="Margherita", price=Decimal("5.00"), menu_id=menu.id)
    db.session.add(food)
    db.session.commit()
    return food


@pytest.fixture
def second_food(menu):
    food = Food(name="Lemonade", price=Decimal("7.50"), menu_id=menu.id)
    db.session.add(food)
    db.session.commit()
    return food