import os

# przed importem backoffice - engine tworzony jest przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import backoffice.data.models  # noqa: F401
from backoffice.data.database import Base, get_db
from backoffice.data.models import IntegrationModel, ProductModel
from backoffice.domain.errors import ChannelError
from backoffice.main import create_app
from backoffice.services import order_service
from backoffice.services.notification_service import NotificationDispatcher, NotificationService
from backoffice.services.telegram_service import TelegramService

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class FakeTelegramClient:
    """Records sends instead of calling the Bot API."""

    def __init__(self):
        self.sent = []
        self.error = None

    def send_message(self, token, chat_id, text, **options):
        if self.error is not None:
            raise self.error
        self.sent.append({"token": token, "chat_id": chat_id, "text": text, **options})
        return {"message_id": len(self.sent)}

    def send_photo(self, token, chat_id, photo, caption=None):
        if self.error is not None:
            raise self.error
        self.sent.append({"token": token, "chat_id": chat_id, "photo": photo, "caption": caption})
        return {"message_id": len(self.sent)}

    def get_bot_info(self, token):
        return {"id": 1, "is_bot": True, "username": "shop_bot"}

    def get_chat_info(self, token, chat_id):
        return {"id": chat_id, "type": "supergroup"}

    def fail_with(self, code=400, description="Bad Request: chat not found"):
        self.error = ChannelError(f"Telegram API Error {code}: {description}", code=code, description=description)


class FakeLock:
    """In-memory stand-in for the Redis dispatch lock."""

    def __init__(self):
        self.held = set()
        self.acquired = 0

    def acquire_dispatch_lock(self, order_id, ttl=None):
        if order_id in self.held:
            return None
        self.held.add(order_id)
        self.acquired += 1
        return f"token-{order_id}"

    def release_dispatch_lock(self, order_id, token):
        self.held.discard(order_id)
        return True


@pytest.fixture(scope="function")
def db():
    """Fresh in-memory database per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def telegram_client():
    return FakeTelegramClient()


@pytest.fixture
def lock():
    return FakeLock()


@pytest.fixture
def dispatcher(db, telegram_client, lock):
    return NotificationDispatcher(
        db,
        telegram=TelegramService(db, client=telegram_client),
        lock_service=lock,
        integration_id=None,
    )


@pytest.fixture
def make_product(db):
    def _make(name="Phone", price="100.00", slug=None, **kwargs):
        product = ProductModel(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            price_current=Decimal(price),
            currency=kwargs.pop("currency", "UAH"),
            images=kwargs.pop("images", [{"url": f"/img/{name}.jpg", "is_main": True}]),
            **kwargs,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_integration(db):
    def _make(**kwargs):
        values = {
            "type": "telegram",
            "name": "Shop bot",
            "status": "active",
            "is_active": True,
            "bot_token": "123:ABC",
            "settings": {"groupId": "-100123"},
            "created_at": datetime.now(timezone.utc),
        }
        values.update(kwargs)
        integration = IntegrationModel(**values)
        db.add(integration)
        db.commit()
        db.refresh(integration)
        return integration

    return _make


@pytest.fixture
def notifications(monkeypatch):
    """Order ids handed to the background notifier."""
    scheduled = []
    monkeypatch.setattr(NotificationService, "send_order_notification", staticmethod(scheduled.append))
    return scheduled


@pytest.fixture
def client(db, notifications, telegram_client, lock, monkeypatch):
    app = create_app(init_database=False)

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    monkeypatch.setattr(
        order_service,
        "NotificationDispatcher",
        lambda session: NotificationDispatcher(
            session,
            telegram=TelegramService(session, client=telegram_client),
            lock_service=lock,
            integration_id=None,
        ),
    )
    return TestClient(app)
