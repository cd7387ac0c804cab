import pytest

from restaurant_pos.errors import Forbidden
from restaurant_pos.models import ROLE_ADMIN, ROLE_USER
from restaurant_pos.services.permissions import (
    MANAGE, MUTATE_ITEMS, VIEW, Caller, authorize, is_authorized
)

STAFF = Caller(1, ROLE_ADMIN)
OWNER = Caller(2, ROLE_USER)
STRANGER = Caller(3, ROLE_USER)


@pytest.mark.parametrize("caller,action,owner_id,expected", [
    (STAFF, VIEW, 2, True),
    (STAFF, MUTATE_ITEMS, 2, True),
    (STAFF, MANAGE, None, True),
    (STAFF, VIEW, None, True),
    (OWNER, VIEW, 2, True),
    (OWNER, MUTATE_ITEMS, 2, True),
    (OWNER, MANAGE, 2, False),
    (STRANGER, VIEW, 2, False),
    (STRANGER, MUTATE_ITEMS, 2, False),
    (OWNER, VIEW, None, False),
])
def test_is_authorized(caller, action, owner_id, expected):
    assert is_authorized(caller, action, owner_id) is expected


def test_authorize_raises_forbidden_with_message():
    with pytest.raises(Forbidden) as excinfo:
        authorize(STRANGER, VIEW, 2, "nope")
    assert excinfo.value.message == "nope"
    assert excinfo.value.status_code == 403


def test_caller_is_staff():
    assert STAFF.is_staff
    assert not OWNER.is_staff
