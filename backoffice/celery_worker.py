# backoffice/celery_worker.py
from celery import Celery

from backoffice.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CART_PURGE_INTERVAL_SECONDS

celery_app = Celery(
    "backoffice",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane jawnie, zeby worker je zarejestrowal
celery_app.conf.imports = (
    "backoffice.tasks.expire",
    "backoffice.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "purge-expired-carts": {
        "task": "backoffice.tasks.expire.purge_expired_carts_task",
        "schedule": float(CART_PURGE_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"
