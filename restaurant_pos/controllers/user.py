from flask.views import MethodView
from flask_smorest import Blueprint
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from restaurant_pos.schemas import LoginSchema, RefreshTokenSchema, SignupSchema
from restaurant_pos.services import auth
from restaurant_pos.services.helper import item_response, list_response
from restaurant_pos.services.permissions import current_caller


blp = Blueprint("Users", __name__, description="Operations on users")


def token_response(user, tokens, message, status=200):
    access_token, refresh_token = tokens
    return {
        "user": user.to_dict(),
        "access_token": access_token,
        "refresh_token": refresh_token,
        "message": message,
        "status": status
    }, status


@blp.route("/users/signup")
class UserSignup(MethodView):
    @jwt_required(optional=True)
    @blp.arguments(SignupSchema)
    def post(self, user_data):
        """Register a user and return it with a fresh token pair."""
        caller = current_caller() if get_jwt_identity() else None
        user, tokens = auth.signup(user_data, caller)
        return token_response(user, tokens, "User created successfully", 201)


@blp.route("/users/login")
class UserLogin(MethodView):
    @blp.arguments(LoginSchema)
    def post(self, user_data):
        user, tokens = auth.login(user_data["email"], user_data["password"])
        return token_response(user, tokens, "Login successful")


@blp.route("/users/refresh")
class TokenRefresh(MethodView):
    @blp.arguments(RefreshTokenSchema)
    def post(self, token_data):
        """Exchange the current refresh token for a new pair."""
        user, tokens = auth.refresh(token_data["refresh_token"])
        return token_response(user, tokens, "Token refreshed successfully")


@blp.route("/users/logout")
class UserLogout(MethodView):
    @jwt_required()
    def post(self):
        claims = get_jwt()
        return auth.logout(current_caller(), claims["jti"], claims["exp"]), 200


@blp.route("/users")
class UserList(MethodView):
    @jwt_required()
    def get(self):
        return list_response(auth.list_users(current_caller()), "user")


@blp.route("/users/<int:user_id>")
class UserResource(MethodView):
    @jwt_required()
    def get(self, user_id):
        user = auth.get_user(current_caller(), user_id)
        return item_response(user, "user", "fetched")
