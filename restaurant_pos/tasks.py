import logging

from celery import shared_task

from restaurant_pos.services.logout import purge_expired_blocklist

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="restaurant_pos.tasks.purge_expired_tokens")
def purge_expired_tokens(self):
    """Delete blocklist entries whose tokens have expired."""
    logger.info("Starting blocklist purge", extra={'event': 'blocklist_purge_started'})
    try:
        return purge_expired_blocklist()
    except Exception as e:
        logger.error(f"Error in purge_expired_tokens: {str(e)}")
        raise self.retry(exc=e, countdown=300)
