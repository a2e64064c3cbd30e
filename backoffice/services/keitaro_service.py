# backoffice/services/keitaro_service.py
from datetime import datetime, timezone, timedelta
from typing import Any, Dict
from urllib.parse import urlencode

import requests
from requests import RequestException

from sqlalchemy.orm import Session

from backoffice.data.models.integration import IntegrationModel
from backoffice.domain.enums import IntegrationStatus
from backoffice.domain.errors import ChannelError, InvalidError
from backoffice.domain.schemas import GenerateButtonLinkIn
from backoffice.services.integration_service import IntegrationService
from backoffice.utils.settings import KEITARO_API_URL, HTTP_TIMEOUT_SECONDS
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REDIRECT_URI = "https://localhost"

# pole formularza kampanii -> parametr w linku
BUTTON_PARAMS = (
    ("campaign_name", "utm_campaign"),
    ("site_source_name", "utm_source"),
    ("placement", "utm_placement"),
    ("campaign_id", "campaign_id"),
    ("adset_id", "adset_id"),
    ("ad_id", "ad_id"),
    ("adset_name", "adset_name"),
    ("ad_name", "ad_name"),
)


class KeitaroService:
    """
    Tracker Keitaro: linki z parametrami UTM, OAuth (code -> token, refresh)
    i wysyłka danych do API.
    """

    def __init__(self, db: Session, base_url: str | None = None, timeout: int | None = None,
                 session: requests.Session | None = None):
        self.integrations = IntegrationService(db)
        self.base_url = (base_url or KEITARO_API_URL).rstrip("/")
        self.timeout = timeout or HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # links
    # ------------------------------------------------------------------
    def generate_tracking_link(self, integration: IntegrationModel, base_url: str,
                               params: Dict[str, Any] | None = None) -> str:
        self._tracking_url(integration)

        query = urlencode([(key, value) for key, value in (params or {}).items() if value])
        if not query:
            return base_url

        separator = "&" if "?" in base_url else "?"
        return f"{base_url}{separator}{query}"

    def generate_button_link(self, integration: IntegrationModel, cmd: GenerateButtonLinkIn) -> str:
        params = {param: getattr(cmd, field) for field, param in BUTTON_PARAMS}
        return self.generate_tracking_link(integration, cmd.base_url, params)

    # ------------------------------------------------------------------
    # oauth
    # ------------------------------------------------------------------
    def exchange_code(self, integration: IntegrationModel, code: str, redirect_uri: str | None = None) -> Dict[str, Any]:
        client_id, client_secret = self._client_credentials(integration)

        payload = {
            "grant_type": "authorization_code",
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "redirect_uri": redirect_uri or (integration.settings or {}).get("redirectUri") or DEFAULT_REDIRECT_URI,
        }
        data = self._post(integration, "/oauth/token", payload, action="exchange code for token")

        self._store_tokens(integration, data)
        integration.status = IntegrationStatus.ACTIVE.value
        integration.code = None
        self.integrations.repo.save(integration)

        logger.info(f"Keitaro integration {integration.id}: code exchanged for token")
        return self._token_result(integration, data)

    def refresh_token(self, integration: IntegrationModel) -> Dict[str, Any]:
        client_id, client_secret = self._client_credentials(integration)
        if not integration.refresh_token:
            raise InvalidError("Keitaro refresh token is not configured", details={"integration_id": integration.id})

        payload = {
            "grant_type": "refresh_token",
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": integration.refresh_token,
        }
        data = self._post(integration, "/oauth/token", payload, action="refresh token")

        self._store_tokens(integration, data)
        self.integrations.repo.save(integration)

        logger.info(f"Keitaro integration {integration.id}: token refreshed")
        return self._token_result(integration, data)

    def send_data(self, integration: IntegrationModel, data: Dict[str, Any], endpoint: str | None = None) -> Dict[str, Any]:
        if not integration.access_token:
            raise InvalidError("Keitaro access token is not configured", details={"integration_id": integration.id})

        path = endpoint or "/api/data"
        if not path.startswith("/"):
            path = f"/{path}"

        response = self._post(
            integration,
            path,
            data,
            action="send data",
            headers={"Authorization": f"Bearer {integration.access_token}"},
        )
        self.integrations.record_usage(integration)
        return {"success": True, "data": response}

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _tracking_url(integration: IntegrationModel) -> str:
        url = integration.tracking_url or (integration.settings or {}).get("trackingUrl")
        if not url:
            raise InvalidError("Keitaro tracking URL is not configured", details={"integration_id": integration.id})
        return url

    @staticmethod
    def _client_credentials(integration: IntegrationModel):
        if not integration.api_key or not integration.api_secret:
            raise InvalidError(
                "Keitaro client ID and client secret are required",
                details={"integration_id": integration.id},
            )
        return integration.api_key, integration.api_secret

    @staticmethod
    def _store_tokens(integration: IntegrationModel, data: Dict[str, Any]):
        integration.access_token = data.get("access_token")
        if data.get("refresh_token"):
            integration.refresh_token = data["refresh_token"]
        if data.get("expires_in"):
            integration.token_expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))

    @staticmethod
    def _token_result(integration: IntegrationModel, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "success": True,
            "expires_in": data.get("expires_in"),
            "expires_at": integration.token_expires_at,
            "has_refresh_token": bool(integration.refresh_token),
        }

    def _post(self, integration: IntegrationModel, path: str, payload: Dict[str, Any], action: str,
              headers: Dict[str, str] | None = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.info(f"Keitaro POST {path} ({action})")

        try:
            resp = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (RequestException, ValueError) as e:
            message = f"Failed to {action}: {type(e).__name__}"
            status = getattr(getattr(e, "response", None), "status_code", None)
            if status is not None:
                message = f"{message} (HTTP {status})"
            self.integrations.record_error(integration, message)
            raise ChannelError(message, code=status) from e
