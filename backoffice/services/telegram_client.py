# backoffice/services/telegram_client.py
import re

import requests
from requests import RequestException

from backoffice.domain.errors import ChannelError
from backoffice.utils.retry import http_retry
from backoffice.utils.settings import TELEGRAM_API_URL, HTTP_TIMEOUT_SECONDS
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

_NUMERIC_CHAT_ID = re.compile(r"^(0|-?[1-9]\d*)$")


def normalize_chat_id(chat_id):
    """
    Telegram odróżnia numeryczne chat_id od nazw typu "@channel".
    String będący w całości liczbą (też ujemną) zamieniamy na int.
    """
    if isinstance(chat_id, str):
        trimmed = chat_id.strip()
        if _NUMERIC_CHAT_ID.match(trimmed):
            return int(trimmed)
        return trimmed
    return chat_id


class TelegramClient:
    """Bot API przez requests. Każde wywołanie zwraca zdekodowany `result` albo rzuca ChannelError."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None, session: requests.Session | None = None):
        self.base_url = (base_url or TELEGRAM_API_URL).rstrip("/")
        self.timeout = timeout or HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def send_message(self, token: str, chat_id, text: str, parse_mode: str = "HTML",
                     disable_web_page_preview: bool = False, **options) -> dict:
        payload = {
            "chat_id": normalize_chat_id(chat_id),
            "text": text,
            "parse_mode": parse_mode,
            "disable_web_page_preview": disable_web_page_preview,
            **options,
        }
        return self._call(token, "sendMessage", lambda url: self._post(url, json=payload))

    def send_photo(self, token: str, chat_id, photo, caption: str | None = None) -> dict:
        data = {"chat_id": normalize_chat_id(chat_id)}
        if caption:
            data["caption"] = caption

        if isinstance(photo, (bytes, bytearray)):
            return self._call(
                token, "sendPhoto", lambda url: self._post(url, data=data, files={"photo": ("photo.jpg", photo)})
            )

        data["photo"] = photo
        return self._call(token, "sendPhoto", lambda url: self._post(url, data=data))

    def get_bot_info(self, token: str) -> dict:
        return self._call(token, "getMe", lambda url: self._get(url))

    def get_chat_info(self, token: str, chat_id) -> dict:
        params = {"chat_id": normalize_chat_id(chat_id)}
        return self._call(token, "getChat", lambda url: self._get(url, params=params))

    # ------------------------------------------------------------------
    def _url(self, token: str, method: str) -> str:
        return f"{self.base_url}/bot{token}/{method}"

    @http_retry()
    def _get(self, url: str, params: dict | None = None):
        return self.session.get(url, params=params, timeout=self.timeout)

    def _post(self, url: str, **kwargs):
        return self.session.post(url, timeout=self.timeout, **kwargs)

    def _call(self, token: str, method: str, send) -> dict:
        # URL zawiera token bota - nie logujemy go
        logger.info(f"Telegram {method}")
        try:
            resp = send(self._url(token, method))
        except RequestException as e:
            logger.error(f"Telegram {method} request failed: {type(e).__name__}")
            raise ChannelError(f"Telegram request failed: {type(e).__name__}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ChannelError(
                f"Telegram {method}: invalid response (HTTP {resp.status_code})", code=resp.status_code
            ) from e

        if not data.get("ok"):
            code = data.get("error_code", resp.status_code)
            description = data.get("description")
            logger.error(f"Telegram {method} failed: {code} {description}")
            raise ChannelError(f"Telegram API Error {code}: {description}", code=code, description=description)

        return data.get("result") or {}
