"""
Telegram dispatch of new orders: channel selection, idempotency and failure outcomes.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from backoffice.domain.enums import DispatchOutcome
from backoffice.domain.schemas import OrderCreate
from backoffice.services.notification_service import NotificationDispatcher
from backoffice.services.order_service import OrderService
from backoffice.services.telegram_service import TelegramService


@pytest.fixture
def place_order(db, make_product):
    counter = itertools.count(1)

    def _place(**overrides):
        product = make_product(name=f"Item {next(counter)}")
        payload = {
            "items": [{"product_id": product.id, "quantity": 2}],
            "customer": {"first_name": "Anna", "last_name": "Kowal", "email": "anna@example.com", "phone": "+380"},
            "payment_method": "cash",
            "delivery_method": "pickup",
        }
        payload.update(overrides)
        return OrderService(db, notifier=lambda order_id: None).create_order(OrderCreate(**payload))

    return _place


class TestDispatch:
    def test_sends_summary_and_marks_order(self, db, dispatcher, place_order, make_integration, telegram_client):
        integration = make_integration()
        order = place_order()

        assert dispatcher.dispatch_order_created(order.id) == DispatchOutcome.SENT

        db.refresh(order)
        db.refresh(integration)
        assert order.is_sent_to_telegram is True
        assert order.sent_to_telegram_at is not None
        assert integration.usage_count == 1

        message = telegram_client.sent[0]
        assert message["token"] == "123:ABC"
        assert message["chat_id"] == -100123
        assert order.order_number in message["text"]

    def test_second_dispatch_does_not_resend(self, dispatcher, place_order, make_integration, telegram_client):
        make_integration()
        order = place_order()

        dispatcher.dispatch_order_created(order.id)
        outcome = dispatcher.dispatch_order_created(order.id)

        assert outcome == DispatchOutcome.ALREADY_SENT
        assert len(telegram_client.sent) == 1

    def test_missing_order(self, dispatcher):
        assert dispatcher.dispatch_order_created(999) == DispatchOutcome.FAILED

    def test_no_active_integration(self, db, dispatcher, place_order, make_integration, telegram_client):
        make_integration(is_active=False)
        make_integration(status="inactive")
        order = place_order()

        assert dispatcher.dispatch_order_created(order.id) == DispatchOutcome.NO_CHANNEL

        db.refresh(order)
        assert order.is_sent_to_telegram is False
        assert telegram_client.sent == []

    def test_integration_without_chat(self, dispatcher, place_order, make_integration, telegram_client):
        make_integration(settings={})
        order = place_order()

        assert dispatcher.dispatch_order_created(order.id) == DispatchOutcome.MISCONFIGURED
        assert telegram_client.sent == []

    def test_integration_without_token(self, dispatcher, place_order, make_integration):
        make_integration(bot_token=None)
        assert dispatcher.dispatch_order_created(place_order().id) == DispatchOutcome.MISCONFIGURED

    def test_api_error_marks_integration(self, db, dispatcher, place_order, make_integration, telegram_client):
        integration = make_integration()
        telegram_client.fail_with(400, "Bad Request: chat not found")
        order = place_order()

        assert dispatcher.dispatch_order_created(order.id) == DispatchOutcome.FAILED

        db.refresh(order)
        db.refresh(integration)
        assert order.is_sent_to_telegram is False
        assert integration.status == "error"
        assert "chat not found" in integration.last_error

    def test_unexpected_error_is_contained(self, dispatcher, place_order, make_integration, telegram_client):
        make_integration()
        telegram_client.error = RuntimeError("boom")

        assert dispatcher.dispatch_order_created(place_order().id) == DispatchOutcome.FAILED

    def test_busy_when_lock_is_held(self, dispatcher, place_order, make_integration, lock, telegram_client):
        make_integration()
        order = place_order()
        lock.held.add(order.id)

        assert dispatcher.dispatch_order_created(order.id) == DispatchOutcome.BUSY
        assert telegram_client.sent == []

    def test_lock_is_released(self, dispatcher, place_order, make_integration, lock):
        make_integration()
        order = place_order()

        dispatcher.dispatch_order_created(order.id)

        assert lock.held == set()
        assert lock.acquired == 1


class TestChannelSelection:
    def test_newest_active_integration_wins(self, dispatcher, make_integration):
        now = datetime.now(timezone.utc)
        make_integration(name="old", created_at=now - timedelta(days=2))
        newest = make_integration(name="new", created_at=now)
        make_integration(name="older", created_at=now - timedelta(days=5))

        assert dispatcher.select_channel().id == newest.id

    def test_bound_integration(self, db, make_integration, telegram_client, lock):
        bound = make_integration(name="bound", created_at=datetime.now(timezone.utc) - timedelta(days=1))
        make_integration(name="newer")

        dispatcher = NotificationDispatcher(
            db,
            telegram=TelegramService(db, client=telegram_client),
            lock_service=lock,
            integration_id=bound.id,
        )

        assert dispatcher.select_channel().id == bound.id

    def test_bound_integration_inactive(self, db, make_integration, telegram_client, lock):
        bound = make_integration(is_active=False)
        make_integration()

        dispatcher = NotificationDispatcher(
            db,
            telegram=TelegramService(db, client=telegram_client),
            lock_service=lock,
            integration_id=bound.id,
        )

        assert dispatcher.select_channel() is None

    def test_other_types_are_ignored(self, dispatcher, make_integration):
        make_integration(type="keitaro")
        assert dispatcher.select_channel() is None
