import logging
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from restaurant_pos import db
from restaurant_pos.errors import ServiceError, StorageFailure, StorageTimeout

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = (
    "timeout",
    "timed out",
    "database is locked",
    "canceling statement due to statement timeout",
)


def storage_timeout():
    """Seconds a single request may spend waiting on the store."""
    return current_app.config["STORAGE_TIMEOUT_SECONDS"]


def _is_timeout(error):
    message = str(getattr(error, "orig", error)).lower()
    return any(marker in message for marker in _TIMEOUT_MARKERS)


@contextmanager
def transaction():
    """Run the enclosed block as a single unit of work.

    Commits when the block finishes, rolls back on any failure. Database
    errors are surfaced as StorageFailure (or StorageTimeout when the
    driver gave up waiting); service errors raised inside the block pass
    through unchanged after the rollback.
    """
    try:
        yield db.session
        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except OperationalError as e:
        db.session.rollback()
        if _is_timeout(e):
            logger.error("Storage timeout", extra={'event': 'storage_timeout', 'exception': str(e)})
            raise StorageTimeout() from e
        logger.error("Storage failure", extra={'event': 'storage_failure', 'exception': str(e)})
        raise StorageFailure() from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Storage failure", extra={'event': 'storage_failure', 'exception': str(e)})
        raise StorageFailure() from e
    except Exception:
        db.session.rollback()
        raise
