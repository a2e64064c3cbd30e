# backoffice/services/facebook_service.py
from datetime import datetime, timezone, timedelta
from typing import Any, Callable, Dict

import requests
from requests import RequestException

from sqlalchemy.orm import Session

from backoffice.data.models.integration import IntegrationModel
from backoffice.domain.enums import IntegrationStatus
from backoffice.domain.errors import ChannelError, InvalidError
from backoffice.services.integration_service import IntegrationService
from backoffice.utils.retry import http_retry
from backoffice.utils.settings import FACEBOOK_API_URL, HTTP_TIMEOUT_SECONDS
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REDIRECT_URI = "https://localhost"
PAGE_FIELDS = "id,name,about,category,fan_count,link,picture"


class FacebookService:
    """
    Strona na Facebooku przez Graph API: wymiana kodu OAuth na token,
    informacje o stronie i publikacja postów.

    Tokeny idą tylko w parametrach zapytania, nigdy do logów ani do odpowiedzi.
    """

    def __init__(self, db: Session, base_url: str | None = None, timeout: int | None = None,
                 session: requests.Session | None = None):
        self.integrations = IntegrationService(db)
        self.base_url = (base_url or FACEBOOK_API_URL).rstrip("/")
        self.timeout = timeout or HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # oauth
    # ------------------------------------------------------------------
    def exchange_code(self, integration: IntegrationModel, code: str, redirect_uri: str | None = None) -> Dict[str, Any]:
        app_id = integration.app_id or integration.api_key
        if not app_id or not integration.api_secret:
            raise InvalidError(
                "Facebook App ID and App Secret are required",
                details={"integration_id": integration.id},
            )

        params = {
            "client_id": app_id,
            "client_secret": integration.api_secret,
            "code": code,
            "redirect_uri": redirect_uri or (integration.settings or {}).get("redirectUri") or DEFAULT_REDIRECT_URI,
        }
        # kod jest jednorazowy, więc bez ponawiania
        data = self._call(
            integration,
            "exchange code for token",
            lambda: self.session.get(f"{self.base_url}/oauth/access_token", params=params, timeout=self.timeout),
        )

        integration.access_token = data.get("access_token")
        integration.token_expires_at = None
        if data.get("expires_in"):
            integration.token_expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))
        integration.status = IntegrationStatus.ACTIVE.value
        integration.code = None
        self.integrations.repo.save(integration)

        logger.info(f"Facebook integration {integration.id}: code exchanged for token")
        return {
            "success": True,
            "has_access_token": bool(integration.access_token),
            "expires_in": data.get("expires_in"),
            "expires_at": integration.token_expires_at,
        }

    # ------------------------------------------------------------------
    # page
    # ------------------------------------------------------------------
    def get_page_info(self, integration: IntegrationModel) -> Dict[str, Any]:
        page_id = self._page_id(integration)
        params = {"access_token": self._access_token(integration), "fields": PAGE_FIELDS}

        return self._call(
            integration,
            "get page info",
            lambda: self._get(f"{self.base_url}/{page_id}", params),
        )

    def post_to_page(self, integration: IntegrationModel, message: str,
                     options: Dict[str, Any] | None = None) -> Dict[str, Any]:
        page_id = self._page_id(integration)
        payload = {**(options or {}), "message": message, "access_token": self._access_token(integration)}

        data = self._call(
            integration,
            "post to Facebook",
            lambda: self.session.post(f"{self.base_url}/{page_id}/feed", json=payload, timeout=self.timeout),
        )
        self.integrations.record_usage(integration)

        logger.info(f"Facebook integration {integration.id}: posted {data.get('id')} to page {page_id}")
        return {"success": True, "post_id": data.get("id"), "data": data}

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _access_token(integration: IntegrationModel) -> str:
        if not integration.access_token:
            raise InvalidError("Facebook access token is not configured", details={"integration_id": integration.id})
        return integration.access_token

    @staticmethod
    def _page_id(integration: IntegrationModel) -> str:
        page_id = integration.page_id or (integration.settings or {}).get("pageId")
        if not page_id:
            raise InvalidError("Facebook page ID is not configured", details={"integration_id": integration.id})
        return page_id

    @http_retry()
    def _get(self, url: str, params: Dict[str, Any]):
        return self.session.get(url, params=params, timeout=self.timeout)

    def _call(self, integration: IntegrationModel, action: str, send: Callable[[], Any]) -> Dict[str, Any]:
        logger.info(f"Facebook integration {integration.id}: {action}")

        try:
            resp = send()
            resp.raise_for_status()
            return resp.json()
        except (RequestException, ValueError) as e:
            # str(e) z requests zawiera URL z tokenem, bierzemy tylko komunikat Graph API
            message = f"Failed to {action}: {_graph_error(e) or type(e).__name__}"
            status = getattr(getattr(e, "response", None), "status_code", None)
            if status is not None:
                message = f"{message} (HTTP {status})"
            self.integrations.record_error(integration, message)
            raise ChannelError(message, code=status) from e


def _graph_error(exc: Exception) -> str | None:
    """{"error": {"message": "..."}} z odpowiedzi Graph API, jeżeli jest."""
    response = getattr(exc, "response", None)
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    return error.get("message") if isinstance(error, dict) else None
