# backoffice/services/notification_service.py
from datetime import datetime, timezone

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from backoffice.celery_worker import celery_app
from backoffice.data.database import SessionLocal
from backoffice.data.models.integration import IntegrationModel
from backoffice.domain.enums import DispatchOutcome, IntegrationStatus, IntegrationType
from backoffice.domain.errors import BackofficeError
from backoffice.repos.integration_repo import IntegrationRepo
from backoffice.repos.order_repo import OrderRepo
from backoffice.services.lock_service import LockService
from backoffice.services.order_message import format_order_message
from backoffice.services.telegram_service import TelegramService, resolve_chat_id, resolve_token
from backoffice.utils.settings import TELEGRAM_INTEGRATION_ID
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationDispatcher:
    """
    Wysyłka podsumowania zamówienia na kanał Telegram.

    Best effort: dispatch_order_created nigdy nie rzuca wyjątku, wynik
    jest zwracany jako DispatchOutcome i zapisywany na zamówieniu
    (is_sent_to_telegram) albo na integracji (last_error).
    """

    def __init__(
        self,
        db: Session,
        telegram: TelegramService | None = None,
        lock_service: LockService | None = None,
        integration_id: int | None = TELEGRAM_INTEGRATION_ID,
    ):
        self.orders = OrderRepo(db)
        self.integrations = IntegrationRepo(db)
        self.telegram = telegram or TelegramService(db)
        self.lock_service = lock_service or LockService()
        self.integration_id = integration_id

    def dispatch_order_created(self, order_id: int) -> DispatchOutcome:
        try:
            return self._dispatch(order_id)
        except Exception:
            # jedyne miejsce, gdzie błędy są połykane - wysyłka nie może wywrócić zamówienia
            logger.exception(f"Dispatch of order {order_id} failed unexpectedly")
            return DispatchOutcome.FAILED

    def select_channel(self) -> IntegrationModel | None:
        """Integracja wskazana w ustawieniach, inaczej najnowsza aktywna integracja Telegram."""
        if self.integration_id is not None:
            integration = self.integrations.get(self.integration_id)
            if integration is None or not _is_usable(integration):
                logger.warning(f"Configured Telegram integration {self.integration_id} is missing or inactive")
                return None
            return integration

        candidates = self.integrations.list_active_by_type(IntegrationType.TELEGRAM.value)
        if len(candidates) > 1:
            logger.info(f"{len(candidates)} active Telegram integrations, using newest ({candidates[0].id})")
        return candidates[0] if candidates else None

    def _dispatch(self, order_id: int) -> DispatchOutcome:
        order = self.orders.get_order(order_id)
        if order is None:
            logger.warning(f"Order {order_id} not found, nothing to dispatch")
            return DispatchOutcome.FAILED

        if order.is_sent_to_telegram:
            logger.info(f"Order {order.order_number} already sent to Telegram")
            return DispatchOutcome.ALREADY_SENT

        token = self.lock_service.acquire_dispatch_lock(order_id)
        if token is None:
            return DispatchOutcome.BUSY

        try:
            # ponowny odczyt pod lockiem - inny worker mógł już wysłać
            self.orders.refresh(order)
            if order.is_sent_to_telegram:
                return DispatchOutcome.ALREADY_SENT

            integration = self.select_channel()
            if integration is None:
                logger.warning(f"No active Telegram integration, order {order.order_number} not sent")
                return DispatchOutcome.NO_CHANNEL

            if not resolve_token(integration) or not resolve_chat_id(integration):
                logger.warning(f"Telegram integration {integration.id} has no bot token or chat id")
                return DispatchOutcome.MISCONFIGURED

            try:
                self.telegram.send_message(integration, format_order_message(order))
            except BackofficeError as e:
                logger.error(f"Sending order {order.order_number} to Telegram failed: {e.message}")
                return DispatchOutcome.FAILED

            order.is_sent_to_telegram = True
            order.sent_to_telegram_at = datetime.now(timezone.utc)
            self.orders.save(order)

            logger.info(f"Order {order.order_number} sent to Telegram via integration {integration.id}")
            return DispatchOutcome.SENT
        finally:
            self._release(order_id, token)

    def _release(self, order_id: int, token: str):
        try:
            self.lock_service.release_dispatch_lock(order_id, token)
        except RedisError as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release dispatch lock of order {order_id}: {e}")


def _is_usable(integration: IntegrationModel) -> bool:
    return (
        integration.type == IntegrationType.TELEGRAM.value
        and integration.is_active
        and integration.status == IntegrationStatus.ACTIVE.value
    )


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(order_id: int):
        send_order_notification_task.delay(order_id)


@celery_app.task(name="backoffice.services.notification_service.send_order_notification_task")
def send_order_notification_task(order_id: int):
    db = SessionLocal()
    try:
        outcome = NotificationDispatcher(db).dispatch_order_created(order_id)
        logger.info(f"[NOTIFICATION] Order {order_id}: {outcome.value}")
        return {"order_id": order_id, "outcome": outcome.value}
    finally:
        db.close()
