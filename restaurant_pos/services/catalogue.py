"""
Menus and the foods listed on them.
"""
import logging
from contextlib import ExitStack

from restaurant_pos import db
from restaurant_pos.errors import FoodInUse, FoodNotFound, MenuInUse, MenuNotFound
from restaurant_pos.models import Food, Menu, OrderItem
from restaurant_pos.services.helper import (
    check_identifier, create_logic, delete_logic, get_item_by_id_logic, update_logic
)
from restaurant_pos.services.locks import order_lock
from restaurant_pos.services.reconciler import open_order_ids_for_food, reconcile_orders
from restaurant_pos.services.storage import transaction

logger = logging.getLogger(__name__)


# Menus

def get_menu(menu_id):
    return get_item_by_id_logic(Menu, menu_id, MenuNotFound)


def menu_categories():
    rows = db.session.query(Menu.category).distinct().order_by(Menu.category).all()
    return [row.category for row in rows]


def create_menu(data):
    return create_logic(Menu, data)


def update_menu(menu_id, data):
    menu = get_menu(menu_id)
    return update_logic(menu, data, "menu_id", menu_id)


def delete_menu(menu_id):
    menu = get_menu(menu_id)
    if menu.foods.count() > 0:
        raise MenuInUse()
    delete_logic(menu)


# Foods

def _require_menu(menu_id):
    if db.session.get(Menu, menu_id) is None:
        raise MenuNotFound("The menu referenced does not exist")


def get_food(food_id):
    return get_item_by_id_logic(Food, food_id, FoodNotFound)


def list_foods(menu_id=None):
    query = Food.query
    if menu_id is not None:
        query = query.filter_by(menu_id=menu_id)
    return query.order_by(Food.id).all()


def search_foods(term):
    return (
        Food.query
        .filter(Food.name.ilike(f"%{term}%"))
        .order_by(Food.id)
        .all()
    )


def foods_in_category(category):
    return (
        Food.query
        .join(Menu, Menu.id == Food.menu_id)
        .filter(Menu.category == category)
        .order_by(Food.id)
        .all()
    )


def create_food(data):
    _require_menu(data["menu_id"])
    return create_logic(Food, data)


def update_food(food_id, data):
    """Update a food. A price change is carried into every still-open order.

    The new price and the recomputed totals commit together, under the
    locks of the affected orders.
    """
    food = get_food(food_id)
    check_identifier(data, "food_id", food_id)
    if data.get("menu_id") is not None:
        _require_menu(data["menu_id"])
    previous_price = food.price
    price_changed = "price" in data and data["price"] != previous_price

    with ExitStack() as scopes:
        held = set()
        if price_changed:
            for order_id in open_order_ids_for_food(food_id):
                scopes.enter_context(order_lock(order_id))
                held.add(order_id)

        with transaction():
            food = Food.query.filter_by(id=food_id).with_for_update().populate_existing().first()
            if food is None:
                raise FoodNotFound()
            for key, value in data.items():
                if key != "food_id" and hasattr(food, key):
                    setattr(food, key, value)
            if price_changed:
                db.session.flush()
                # Orders that picked up the food while the locks were taken
                order_ids = open_order_ids_for_food(food_id)
                for order_id in order_ids:
                    if order_id not in held:
                        scopes.enter_context(order_lock(order_id))
                        held.add(order_id)
                reconcile_orders(order_ids)

    if price_changed:
        logger.info(f"Food {food_id} price changed: {previous_price} -> {food.price}", extra={
            'event': 'food_price_changed',
            'food_id': food_id
        })
    return food


def delete_food(food_id):
    food = get_food(food_id)
    if OrderItem.query.filter_by(food_id=food_id).count() > 0:
        raise FoodInUse()
    delete_logic(food)
