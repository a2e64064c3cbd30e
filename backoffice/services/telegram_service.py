# backoffice/services/telegram_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from backoffice.data.models.integration import IntegrationModel
from backoffice.domain.errors import ChannelError, InvalidError
from backoffice.services.integration_service import IntegrationService
from backoffice.services.telegram_client import TelegramClient, normalize_chat_id
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_token(integration: IntegrationModel) -> str | None:
    return integration.bot_token or integration.token


def resolve_chat_id(integration: IntegrationModel, override=None):
    settings = integration.settings or {}
    return override or settings.get("groupId") or settings.get("chat_id") or integration.chat_id


class TelegramService:
    """
    Łączy rekord integracji z klientem Bot API: wybiera token i chat,
    po wysyłce zapisuje statystyki użycia albo błąd na integracji.
    """

    def __init__(self, db: Session, client: TelegramClient | None = None):
        self.integrations = IntegrationService(db)
        self.client = client or TelegramClient()

    def send_message(self, integration: IntegrationModel, text: str, group_id=None,
                     options: Dict[str, Any] | None = None) -> Dict[str, Any]:
        token, chat_id = self._target(integration, group_id)

        try:
            result = self.client.send_message(token, chat_id, text, **(options or {}))
        except ChannelError as e:
            self.integrations.record_error(integration, e.message)
            raise

        self.integrations.record_usage(integration)
        logger.info(f"Telegram message {result.get('message_id')} sent via integration {integration.id}")
        return {"success": True, "message_id": result.get("message_id"), "chat_id": chat_id}

    def send_photo(self, integration: IntegrationModel, photo, caption: str | None = None,
                   group_id=None) -> Dict[str, Any]:
        token, chat_id = self._target(integration, group_id)

        try:
            result = self.client.send_photo(token, chat_id, photo, caption=caption)
        except ChannelError as e:
            self.integrations.record_error(integration, e.message)
            raise

        self.integrations.record_usage(integration)
        return {"success": True, "message_id": result.get("message_id"), "chat_id": chat_id}

    def get_bot_info(self, integration: IntegrationModel) -> Dict[str, Any]:
        return self.client.get_bot_info(self._token(integration))

    def get_chat_info(self, integration: IntegrationModel, chat_id=None) -> Dict[str, Any]:
        token, target = self._target(integration, chat_id)
        return self.client.get_chat_info(token, target)

    def _token(self, integration: IntegrationModel) -> str:
        token = resolve_token(integration)
        if not token:
            raise InvalidError("Telegram bot token is not configured", details={"integration_id": integration.id})
        return token

    def _target(self, integration: IntegrationModel, override=None):
        token = self._token(integration)
        chat_id = resolve_chat_id(integration, override)
        if not chat_id:
            raise InvalidError("Group ID is not configured", details={"integration_id": integration.id})
        return token, normalize_chat_id(chat_id)
