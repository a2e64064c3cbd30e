# backoffice/tasks/expire.py
from datetime import datetime, timezone

from backoffice.celery_worker import celery_app
from backoffice.data.database import SessionLocal
from backoffice.services.cart_service import CartService
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="backoffice.tasks.expire.purge_expired_carts_task")
def purge_expired_carts_task():
    logger.info("Purge expired carts task started")

    db = SessionLocal()
    try:
        removed = CartService(db).purge_expired(datetime.now(timezone.utc))
        logger.info(f"Purged {removed} carts")
        return {"removed": removed}
    finally:
        db.close()
