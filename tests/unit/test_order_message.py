"""
Unit tests for the order notification text.
"""

import json
from decimal import Decimal

from backoffice.data.models import OrderItemModel, OrderModel
from backoffice.services.order_message import format_order_message, mask_card_number, parse_legacy_card


def build_order(**overrides):
    values = dict(
        order_number="ORD-1700000000000-42",
        customer={"first_name": "Ivan", "last_name": "<Petrov>", "email": "ivan@example.com", "phone": "+380501234567"},
        delivery_address=None,
        status="pending",
        payment_method="card",
        delivery_method="courier",
        subtotal=Decimal("200.00"),
        discount=Decimal("0.00"),
        delivery_cost=Decimal("10.00"),
        total=Decimal("210.00"),
        currency="UAH",
        notes=None,
        promo_code=None,
        payment_details=None,
    )
    values.update(overrides)
    order = OrderModel(**values)
    order.items = [
        OrderItemModel(position=0, product_id=1, product_name="Phone & Case", quantity=2,
                       price=Decimal("100.00"), discount=Decimal("0.00"), total=Decimal("200.00")),
    ]
    return order


class TestFormatOrderMessage:
    def test_contains_order_summary(self):
        text = format_order_message(build_order())

        assert "New order #ORD-1700000000000-42" in text
        assert "1. <b>Phone &amp; Case</b>" in text
        assert "Quantity: 2" in text
        assert "Price: 100.00 UAH" in text
        assert "<b>Total: 210.00 UAH</b>" in text
        assert "<b>Payment:</b> Card" in text
        assert "<b>Delivery:</b> Courier" in text
        assert "Status: Pending" in text

    def test_user_values_are_escaped(self):
        text = format_order_message(build_order(notes="<script>x</script>"))

        assert "&lt;Petrov&gt;" in text
        assert "<script>" not in text

    def test_discount_line_only_when_positive(self):
        assert "Discount" not in format_order_message(build_order())
        assert "Discount: -15.00 UAH" in format_order_message(build_order(discount=Decimal("15")))

    def test_address_block(self):
        address = {"country": "Ukraine", "city": "Kyiv", "street": "Khreshchatyk", "building": "1",
                   "apartment": "5", "postal_code": "01001"}
        text = format_order_message(build_order(delivery_address=address))

        assert "Ukraine, Kyiv" in text
        assert "Khreshchatyk, 1, apt. 5" in text
        assert "Postal code: 01001" in text

    def test_card_block_is_masked(self):
        text = format_order_message(
            build_order(payment_details={"card_last4": "4242", "expiry": "12/30", "cardholder_name": "IVAN PETROV"})
        )

        assert text.index("Card details") > text.index("Status:")
        assert "**** 4242" in text
        assert "Expiry:</b> 12/30" in text
        assert "CVC" not in text

    def test_legacy_card_in_notes_is_not_echoed(self):
        notes = json.dumps({"cardNumber": "4111 1111 1111 1111", "cvc": "123", "expiry": "01/29"})
        text = format_order_message(build_order(notes=notes))

        assert "4111 1111" not in text
        assert "123" not in text.split("Card details")[1]
        assert "**** 1111" in text
        assert "Comment" not in text


class TestCardHelpers:
    def test_mask_card_number(self):
        assert mask_card_number("4111-1111-1111-1234") == "**** 1234"
        assert mask_card_number("") is None

    def test_parse_legacy_card(self):
        assert parse_legacy_card("call me before delivery") is None
        assert parse_legacy_card('{"comment": "x"}') is None
        assert parse_legacy_card('{"cvc": "999"}')["cvc"] == "999"
