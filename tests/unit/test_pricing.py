"""
Unit tests for order pricing.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.domain.errors import InvalidError
from backoffice.domain.schemas import OrderItemIn
from backoffice.services.pricing_service import PricingService, money, parse_id


def product(id, price, name=None):
    return SimpleNamespace(
        id=id,
        name=name or f"Product {id}",
        slug=f"product-{id}",
        price_current=Decimal(price),
        main_image=None,
    )


def lookup_from(*products):
    catalog = {p.id: p for p in products}
    calls = []

    def lookup(ids):
        calls.append(list(ids))
        return [catalog[i] for i in ids if i in catalog]

    lookup.calls = calls
    return lookup


class TestParseId:
    @pytest.mark.parametrize("raw, expected", [(5, 5), ("7", 7), (" 8 ", 8), (0, None), (-1, None),
                                               ("abc", None), ("1.5", None), (True, None), (None, None)])
    def test_parse_id(self, raw, expected):
        assert parse_id(raw) == expected


class TestPriceOrder:
    """Tests for PricingService.price_order."""

    def test_subtotal_and_total(self):
        pricing = PricingService()
        priced = pricing.price_order([OrderItemIn(product_id=1, quantity=2)], lookup_from(product(1, "100")))

        assert priced.subtotal == Decimal("200.00")
        assert priced.lines[0].price == Decimal("100.00")
        assert priced.lines[0].total == Decimal("200.00")
        assert pricing.order_total(priced.subtotal, Decimal("0"), Decimal("10")) == Decimal("210.00")

    def test_subtotal_is_sum_of_lines(self):
        items = [
            OrderItemIn(product_id=1, quantity=3),
            OrderItemIn(product_id="2", quantity=1),
            OrderItemIn(product_id=1, quantity=1, variant="red"),
        ]
        priced = PricingService().price_order(items, lookup_from(product(1, "9.99"), product(2, "0.01")))

        assert [line.total for line in priced.lines] == [Decimal("29.97"), Decimal("0.01"), Decimal("9.99")]
        assert priced.subtotal == sum(line.total for line in priced.lines)
        assert priced.lines[2].variant == "red"

    def test_all_invalid_ids_are_reported(self):
        lookup = lookup_from(product(1, "10"))
        items = [
            OrderItemIn(product_id="abc", quantity=1),
            OrderItemIn(product_id=1, quantity=1),
            OrderItemIn(product_id=-4, quantity=1),
        ]

        with pytest.raises(InvalidError) as exc:
            PricingService().price_order(items, lookup)

        assert [entry["index"] for entry in exc.value.details["invalid"]] == [0, 2]
        assert lookup.calls == []

    def test_all_missing_products_are_reported(self):
        items = [OrderItemIn(product_id=i, quantity=1) for i in (1, 404, 405, 404)]

        with pytest.raises(InvalidError) as exc:
            PricingService().price_order(items, lookup_from(product(1, "10")))

        assert exc.value.details["missing"] == [404, 405]

    def test_empty_order_is_rejected(self):
        with pytest.raises(InvalidError):
            PricingService().price_order([], lookup_from())


class TestOrderTotal:
    def test_discount_applies_at_order_level(self):
        assert PricingService().order_total(Decimal("200"), Decimal("50"), Decimal("10")) == Decimal("160.00")

    def test_discount_larger_than_order_is_rejected(self):
        with pytest.raises(InvalidError):
            PricingService().order_total(Decimal("20"), Decimal("31"), Decimal("10"))

    def test_money_rounds_half_up(self):
        assert money("2.345") == Decimal("2.35")
