# backoffice/services/order_message.py
"""Czytelne podsumowanie zamówienia dla komunikatorów (Telegram, parse mode HTML)."""
import json
from decimal import Decimal
from html import escape

from backoffice.data.models.order import OrderModel

PAYMENT_METHOD_LABELS = {
    "cash": "Cash",
    "card": "Card",
    "online": "Online",
    "bank_transfer": "Bank transfer",
}

DELIVERY_METHOD_LABELS = {
    "pickup": "Pickup",
    "courier": "Courier",
    "post": "Post",
    "express": "Express delivery",
}

STATUS_LABELS = {
    "pending": "Pending",
    "confirmed": "Confirmed",
    "processing": "Processing",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
    "refunded": "Refunded",
}

# klucze starego formatu: dane karty wklejone jako JSON w notes
_LEGACY_CARD_KEYS = {
    "cardNumber": "card_number",
    "expiry": "expiry",
    "cardholderName": "cardholder_name",
    "cvc": "cvc",
}


def mask_card_number(number) -> str | None:
    digits = "".join(ch for ch in str(number or "") if ch.isdigit())
    if not digits:
        return None
    return f"**** {digits[-4:]}"


def parse_legacy_card(notes: str | None) -> dict | None:
    """Dane karty wklejone do notes jako JSON przez stary checkout albo None."""
    if not notes:
        return None
    try:
        data = json.loads(notes)
    except ValueError:
        return None
    if not isinstance(data, dict) or not (data.get("cardNumber") or data.get("cvc")):
        return None
    return {new: data.get(old) for old, new in _LEGACY_CARD_KEYS.items()}


def card_details(order: OrderModel) -> dict | None:
    details = order.payment_details or None
    if details:
        return details
    return parse_legacy_card(order.notes)


def _money(value, currency: str) -> str:
    return f"{Decimal(str(value)):.2f} {escape(currency)}"


def _address_block(address: dict) -> list[str]:
    line = ", ".join(escape(str(address[k])) for k in ("country", "city") if address.get(k))
    street = escape(str(address.get("street") or ""))
    if address.get("building"):
        street += f", {escape(str(address['building']))}"
    if address.get("apartment"):
        street += f", apt. {escape(str(address['apartment']))}"

    lines = ["", "<b>Delivery address:</b>", line, street]
    if address.get("postal_code"):
        lines.append(f"Postal code: {escape(str(address['postal_code']))}")
    if address.get("notes"):
        lines.append(f"Note: {escape(str(address['notes']))}")
    return lines


def _card_block(card: dict) -> list[str]:
    # CVC nigdy nie trafia do wiadomosci, numer tylko ostatnie 4 cyfry
    parts = []
    masked = mask_card_number(card.get("card_last4") or card.get("card_number"))
    if masked:
        parts.append(f"<b>Card number:</b> {masked}")
    if card.get("expiry"):
        parts.append(f"<b>Expiry:</b> {escape(str(card['expiry']))}")
    if card.get("cardholder_name"):
        parts.append(f"<b>Cardholder:</b> {escape(str(card['cardholder_name']))}")

    if not parts:
        return []
    return ["", "💳 <b>Card details:</b>", *parts]


def format_order_message(order: OrderModel) -> str:
    currency = order.currency
    lines = [f"🛒 <b>New order #{escape(order.order_number)}</b>", "", "<b>Items:</b>"]

    for index, item in enumerate(order.items, start=1):
        if index > 1:
            lines.append("")
        lines.extend([
            f"{index}. <b>{escape(item.product_name)}</b>",
            f"   Quantity: {item.quantity}",
            f"   Price: {_money(item.price, currency)}",
            f"   Total: {_money(item.total, currency)}",
        ])

    customer = order.customer or {}
    name = f"{customer.get('first_name', '')} {customer.get('last_name', '')}".strip()
    lines.extend([
        "",
        "<b>Customer:</b>",
        f"Name: {escape(name)}",
        f"Email: {escape(str(customer.get('email', '')))}",
        f"Phone: {escape(str(customer.get('phone', '')))}",
    ])
    if customer.get("company"):
        lines.append(f"Company: {escape(str(customer['company']))}")

    if order.delivery_address:
        lines.extend(_address_block(order.delivery_address))

    lines.extend([
        "",
        f"<b>Payment:</b> {PAYMENT_METHOD_LABELS.get(order.payment_method, escape(str(order.payment_method)))}",
        f"<b>Delivery:</b> {DELIVERY_METHOD_LABELS.get(order.delivery_method, escape(str(order.delivery_method)))}",
        "",
        "<b>Amount:</b>",
        f"Items: {_money(order.subtotal, currency)}",
    ])
    if order.discount and Decimal(str(order.discount)) > 0:
        lines.append(f"Discount: -{_money(order.discount, currency)}")
    lines.extend([
        f"Delivery: {_money(order.delivery_cost, currency)}",
        f"<b>Total: {_money(order.total, currency)}</b>",
    ])

    legacy_card = parse_legacy_card(order.notes)
    if order.notes and not legacy_card:
        lines.extend(["", f"<b>Comment:</b> {escape(order.notes)}"])
    if order.promo_code:
        lines.extend(["", f"<b>Promo code:</b> {escape(order.promo_code)}"])

    lines.extend(["", f"Status: {STATUS_LABELS.get(order.status, escape(str(order.status)))}"])

    card = card_details(order)
    if card:
        lines.extend(_card_block(card))

    return "\n".join(lines)
