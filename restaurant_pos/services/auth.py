"""
Authentication surface: signup, login, refresh and logout.
"""
import logging

from flask import current_app
from passlib.hash import pbkdf2_sha256

from restaurant_pos.errors import InvalidCredentials, UserNotFound
from restaurant_pos.models import ROLE_USER, User
from restaurant_pos.services.logout import logout_logic
from restaurant_pos.services.permissions import MANAGE, VIEW, authorize
from restaurant_pos.services.storage import transaction
from restaurant_pos.services.tokens import identity_of

logger = logging.getLogger(__name__)


def token_service():
    return current_app.extensions["token_service"]


def signup(data, caller=None):
    """Register a user and hand back their first token pair.

    Only an authenticated staff caller may choose the role; everyone else
    is registered as a customer. The user row and its stored pair commit
    together.
    """
    service = token_service()
    data = dict(data)
    if caller is None or not caller.is_staff:
        data["role"] = ROLE_USER

    with transaction():
        user = service.store.add(data)
        access_token, refresh_token = service.issue(identity_of(user))
        user.token = access_token
        user.refresh_token = refresh_token

    logger.info(f"User {user.id} signed up", extra={
        'event': 'user_signed_up',
        'user_id': user.id
    })
    return user, (access_token, refresh_token)


def login(email, password):
    service = token_service()
    user = service.store.find_by_email(email)
    if user is None or not pbkdf2_sha256.verify(password, user.password):
        logger.warning("Failed login attempt", extra={'event': 'login_failed'})
        raise InvalidCredentials()
    return user, service.rotate(user.id)


def refresh(refresh_token):
    return token_service().refresh(refresh_token)


def logout(caller, jti, expires_at):
    """Revoke the presented access token and forget the stored pair."""
    service = token_service()
    result = logout_logic(jti, expires_at)
    user = service.store.find_by_id(caller.user_id)
    if user is not None:
        service.store.clear_tokens(user)
    logger.info(f"User {caller.user_id} logged out", extra={
        'event': 'user_logged_out',
        'user_id': caller.user_id
    })
    return result


def get_user(caller, user_id):
    authorize(caller, VIEW, user_id, "You don't have permission to view this user")
    user = token_service().store.find_by_id(user_id)
    if user is None:
        raise UserNotFound()
    return user


def list_users(caller):
    authorize(caller, MANAGE, message="You don't have permission to access this resource")
    return User.query.order_by(User.id).all()
