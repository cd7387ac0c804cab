import logging
from datetime import datetime, timezone

from restaurant_pos import db
from restaurant_pos.models import TokenBlocklist
from restaurant_pos.services.storage import transaction

logger = logging.getLogger(__name__)


def _utc(timestamp):
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).replace(tzinfo=None)


def logout_logic(jti, expires_at):
    """Add token to the blocklist with its expiration time."""
    with transaction():
        db.session.add(TokenBlocklist(jti=jti, expires_at=_utc(expires_at)))
    return {"message": "Logged out successfully", "status": 200}


def is_token_revoked(jwt_payload):
    """Check if the token is in the blocklist."""
    jti = jwt_payload["jti"]
    return TokenBlocklist.query.filter_by(jti=jti).first() is not None


def purge_expired_blocklist(now=None):
    """Drop blocklist rows for tokens that could no longer verify anyway."""
    now = now or datetime.utcnow()
    with transaction():
        removed = (
            TokenBlocklist.query
            .filter(TokenBlocklist.expires_at < now)
            .delete(synchronize_session=False)
        )
    logger.info(f"Purged {removed} expired blocklist entries", extra={
        'event': 'blocklist_purged'
    })
    return removed
