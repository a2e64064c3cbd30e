# backoffice/domain/enums.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"


class DeliveryMethod(str, Enum):
    PICKUP = "pickup"
    COURIER = "courier"
    POST = "post"
    EXPRESS = "express"


class IntegrationType(str, Enum):
    FACEBOOK = "facebook"
    TELEGRAM = "telegram"
    INSTAGRAM = "instagram"
    WHATSAPP = "whatsapp"
    VIBER = "viber"
    EMAIL = "email"
    SMS = "sms"
    KEITARO = "keitaro"
    CUSTOM = "custom"


class IntegrationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


class MenuItemType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    DIVIDER = "divider"
    HEADER = "header"


class DispatchOutcome(str, Enum):
    SENT = "sent"
    ALREADY_SENT = "already_sent"
    NO_CHANNEL = "no_channel"
    MISCONFIGURED = "misconfigured"
    FAILED = "failed"
    BUSY = "busy"


TERMINAL_ORDER_STATUSES = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

# Oczekiwany cykl życia. Nie jest wymuszany: admin może poprawić zamówienie ręcznie,
# przejścia spoza tabeli są tylko logowane.
ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUNDED: set(),
}


def is_expected_transition(current: str, new: str) -> bool:
    if current == new:
        return True
    try:
        return OrderStatus(new) in ORDER_STATUS_TRANSITIONS[OrderStatus(current)]
    except (ValueError, KeyError):
        return False
