from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import jwt_required

from restaurant_pos.schemas import (
    FoodQuerySchema, FoodSchema, FoodSearchSchema, FoodUpdateSchema
)
from restaurant_pos.services import catalogue
from restaurant_pos.services.helper import item_response, list_response, message_response
from restaurant_pos.controllers.table import check_staff

blp = Blueprint("Foods", __name__, description="Operations on food items")


@blp.route("/foods")
class FoodList(MethodView):
    @jwt_required()
    @blp.arguments(FoodQuerySchema, location="query")
    def get(self, args):
        """List foods, optionally those of a single menu."""
        return list_response(catalogue.list_foods(args.get("menu_id")), "food")

    @jwt_required()
    @blp.arguments(FoodSchema)
    def post(self, food_data):
        check_staff()
        food = catalogue.create_food(food_data)
        return item_response(food, "food", "created", 201)


@blp.route("/foods/<int:food_id>")
class FoodResource(MethodView):
    @jwt_required()
    def get(self, food_id):
        return item_response(catalogue.get_food(food_id), "food", "fetched")

    @jwt_required()
    @blp.arguments(FoodUpdateSchema)
    def patch(self, food_data, food_id):
        check_staff()
        food = catalogue.update_food(food_id, food_data)
        return item_response(food, "food", "updated")

    @jwt_required()
    def delete(self, food_id):
        check_staff()
        catalogue.delete_food(food_id)
        return message_response("Food deleted successfully")


@blp.route("/foods/search")
class FoodSearch(MethodView):
    @jwt_required()
    @blp.arguments(FoodSearchSchema, location="query")
    def get(self, args):
        return list_response(catalogue.search_foods(args["q"]), "food")


@blp.route("/foods/category/<string:category>")
class FoodByCategory(MethodView):
    @jwt_required()
    def get(self, category):
        return list_response(catalogue.foods_in_category(category), "food")
