# backoffice/services/integration_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from backoffice.data.models.integration import IntegrationModel
from backoffice.domain.enums import IntegrationStatus
from backoffice.domain.errors import NotFoundError
from backoffice.domain.schemas import IntegrationCreate, IntegrationUpdate
from backoffice.repos.integration_repo import IntegrationRepo
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

MAX_ERROR_LENGTH = 1000
# kolumny NOT NULL - jawny null w patchu jest ignorowany
REQUIRED_FIELDS = frozenset({"name", "status", "is_active", "settings", "credentials"})


class IntegrationService:
    """
    Rekordy integracji (kanały zewnętrzne) + statystyki użycia i błędów.
    """

    def __init__(self, db: Session):
        self.repo = IntegrationRepo(db)

    # query
    def get(self, integration_id: int) -> IntegrationModel:
        integration = self.repo.get(integration_id)
        if not integration:
            raise NotFoundError("Integration", id=integration_id)
        return integration

    def list(self, include_inactive: bool = False) -> List[IntegrationModel]:
        return self.repo.list(include_inactive)

    def find_by_type(self, type: str, include_inactive: bool = False) -> List[IntegrationModel]:
        return self.repo.list(include_inactive, type=type)

    def find_active_by_type(self, type: str) -> List[IntegrationModel]:
        return self.repo.list_active_by_type(type)

    def statistics(self) -> Dict[str, Any]:
        return {
            "total": self.repo.count(),
            "active": self.repo.count(is_active=True),
            "inactive": self.repo.count(is_active=False),
            "by_type": self.repo.count_by_type(),
        }

    # commands
    def create(self, cmd: IntegrationCreate) -> IntegrationModel:
        created = self.repo.create(IntegrationModel(**cmd.model_dump()))
        logger.info(f"Integration {created.id} ({created.type}) created")
        return created

    def update(self, integration_id: int, patch: IntegrationUpdate | Dict[str, Any]) -> IntegrationModel:
        integration = self.get(integration_id)
        raw = patch if isinstance(patch, dict) else patch.model_dump(exclude_unset=True)
        fields = {k: v for k, v in raw.items() if v is not None or k not in REQUIRED_FIELDS}

        for key, value in fields.items():
            setattr(integration, key, value)

        saved = self.repo.save(integration)
        logger.info(f"Integration {integration_id} updated: {sorted(fields)}")
        return saved

    def remove(self, integration_id: int) -> Dict[str, Any]:
        integration = self.get(integration_id)
        snapshot = self.to_dict(integration)
        self.repo.delete(integration)
        logger.info(f"Integration {integration_id} deleted")
        return snapshot

    def activate(self, integration_id: int) -> IntegrationModel:
        return self.update(integration_id, {"is_active": True, "status": IntegrationStatus.ACTIVE.value})

    def deactivate(self, integration_id: int) -> IntegrationModel:
        return self.update(integration_id, {"is_active": False, "status": IntegrationStatus.INACTIVE.value})

    def record_usage(self, integration: IntegrationModel) -> IntegrationModel:
        integration.usage_count = (integration.usage_count or 0) + 1
        integration.last_used_at = datetime.now(timezone.utc)
        return self.repo.save(integration)

    def record_error(self, integration: IntegrationModel, error: str) -> IntegrationModel:
        integration.last_error = error[:MAX_ERROR_LENGTH]
        integration.last_error_at = datetime.now(timezone.utc)
        integration.status = IntegrationStatus.ERROR.value
        logger.warning(f"Integration {integration.id} marked as error: {integration.last_error}")
        return self.repo.save(integration)

    @staticmethod
    def to_dict(integration: IntegrationModel) -> Dict[str, Any]:
        # bez sekretow, tylko informacja czy sa ustawione
        return {
            "id": integration.id,
            "type": integration.type,
            "name": integration.name,
            "description": integration.description,
            "status": integration.status,
            "is_active": integration.is_active,
            "has_bot_token": bool(integration.bot_token or integration.token),
            "has_access_token": bool(integration.access_token),
            "chat_id": integration.chat_id,
            "page_id": integration.page_id,
            "tracking_url": integration.tracking_url,
            "settings": integration.settings or {},
            "usage_count": integration.usage_count or 0,
            "last_used_at": integration.last_used_at,
            "last_error": integration.last_error,
            "last_error_at": integration.last_error_at,
            "token_expires_at": integration.token_expires_at,
            "created_at": integration.created_at,
        }
