"""
Unit tests for the Telegram Bot API client.
"""

import pytest
from requests import ConnectionError as RequestsConnectionError

from backoffice.domain.errors import ChannelError
from backoffice.services.telegram_client import TelegramClient, normalize_chat_id


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, timeout=None, **kwargs):
        self.calls.append(("post", url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def get(self, url, params=None, timeout=None):
        self.calls.append(("get", url, {"params": params}))
        return self.response


class TestNormalizeChatId:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("-100123", -100123),
            (" 42 ", 42),
            ("0", 0),
            ("@shop_channel", "@shop_channel"),
            ("12abc", "12abc"),
            ("-0", "-0"),
            ("007", "007"),
            (555, 555),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_chat_id(raw) == expected


class TestTelegramClient:
    def test_send_message_payload(self):
        session = FakeSession(FakeResponse({"ok": True, "result": {"message_id": 7}}))
        client = TelegramClient(base_url="https://tg.test", session=session)

        result = client.send_message("123:ABC", "-100500", "<b>hi</b>")

        method, url, kwargs = session.calls[0]
        assert method == "post"
        assert url == "https://tg.test/bot123:ABC/sendMessage"
        assert kwargs["json"]["chat_id"] == -100500
        assert kwargs["json"]["parse_mode"] == "HTML"
        assert result == {"message_id": 7}

    def test_api_error_carries_code_and_description(self):
        session = FakeSession(FakeResponse({"ok": False, "error_code": 400, "description": "chat not found"}, 400))
        client = TelegramClient(session=session)

        with pytest.raises(ChannelError) as exc:
            client.send_message("t", "1", "x")

        assert exc.value.code == 400
        assert exc.value.description == "chat not found"

    def test_transport_error_hides_token(self):
        session = FakeSession(error=RequestsConnectionError("https://api.telegram.org/botSECRET/sendMessage"))
        client = TelegramClient(session=session)

        with pytest.raises(ChannelError) as exc:
            client.send_message("SECRET", "1", "x")

        assert "SECRET" not in exc.value.message

    def test_get_chat_info_normalizes_chat_id(self):
        session = FakeSession(FakeResponse({"ok": True, "result": {"id": -1001, "type": "group"}}))
        client = TelegramClient(session=session)

        assert client.get_chat_info("t", "-1001")["type"] == "group"
        assert session.calls[0][2]["params"] == {"chat_id": -1001}
