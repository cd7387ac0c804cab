"""
Single authorization predicate shared by every service.

Staff (ADMIN) may act on any resource. Other callers may only view or
change the items of resources they own; every other action is staff-only.
"""
from flask_jwt_extended import get_jwt, get_jwt_identity

from restaurant_pos.errors import Forbidden
from restaurant_pos.models import ROLE_ADMIN

VIEW = "view"
MUTATE_ITEMS = "mutate_items"
MANAGE = "manage"

OWNER_ACTIONS = (VIEW, MUTATE_ITEMS)


class Caller:
    """Authenticated identity the transport layer hands to services."""

    def __init__(self, user_id, role):
        self.user_id = user_id
        self.role = role

    @property
    def is_staff(self):
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<Caller {self.user_id} {self.role}>"


def current_caller():
    """Build the Caller from the verified JWT of the current request."""
    claims = get_jwt()
    return Caller(user_id=int(get_jwt_identity()), role=claims.get("role"))


def is_authorized(caller, action, owner_id=None):
    if caller.is_staff:
        return True
    if action in OWNER_ACTIONS:
        return owner_id is not None and owner_id == caller.user_id
    return False


def authorize(caller, action, owner_id=None, message=None):
    if not is_authorized(caller, action, owner_id):
        raise Forbidden(message)
