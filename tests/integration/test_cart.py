"""
Session/user carts.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from backoffice.data.models import CartModel
from backoffice.domain.errors import InvalidError, NotFoundError
from backoffice.domain.schemas import CartItemIn
from backoffice.services.cart_service import CartService


@pytest.fixture
def carts(db):
    return CartService(db)


class TestGetOrCreate:
    def test_exactly_one_key_is_required(self, carts):
        with pytest.raises(InvalidError):
            carts.get_or_create()
        with pytest.raises(InvalidError):
            carts.get_or_create(session_id="s1", user_id=1)

    def test_same_key_same_cart(self, carts):
        first = carts.get_or_create(session_id="s1")
        again = carts.get_or_create(session_id="s1")
        other = carts.get_or_create(user_id=7)

        assert first.id == again.id
        assert other.id != first.id
        assert other.user_id == 7

    def test_expiry_is_set_at_creation(self, carts):
        before = datetime.now(timezone.utc).replace(tzinfo=None)
        cart = carts.get_or_create(session_id="s1")
        expires = cart.expires_at.replace(tzinfo=None)

        assert timedelta(days=29) < expires - before <= timedelta(days=30, seconds=5)


class TestItems:
    def test_same_product_and_variant_merge(self, carts, make_product):
        phone = make_product()
        cart = carts.get_or_create(session_id="s1")

        carts.add_item(cart, CartItemIn(product_id=phone.id, quantity=1, variant="black"))
        cart = carts.add_item(cart, CartItemIn(product_id=phone.id, quantity=2, variant="black"))

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_different_variant_is_new_line(self, carts, make_product):
        phone = make_product()
        cart = carts.get_or_create(session_id="s1")

        carts.add_item(cart, CartItemIn(product_id=phone.id, quantity=1, variant="black"))
        cart = carts.add_item(cart, CartItemIn(product_id=phone.id, quantity=1, variant="white"))

        assert [line.variant for line in cart.items] == ["black", "white"]

    def test_unknown_product(self, carts):
        cart = carts.get_or_create(session_id="s1")

        with pytest.raises(NotFoundError):
            carts.add_item(cart, CartItemIn(product_id=404))

    def test_quantity_zero_removes_line(self, carts, make_product):
        cart = carts.get_or_create(session_id="s1")
        cart = carts.add_item(cart, CartItemIn(product_id=make_product().id, quantity=2))
        line_id = cart.items[0].id

        assert carts.set_quantity(cart, line_id, 5).items[0].quantity == 5
        assert carts.set_quantity(cart, line_id, 0).items == []

    def test_set_quantity_on_unknown_line(self, carts):
        cart = carts.get_or_create(session_id="s1")

        with pytest.raises(NotFoundError):
            carts.set_quantity(cart, 99, 1)

    def test_remove_and_clear(self, carts, make_product):
        cart = carts.get_or_create(session_id="s1")
        cart = carts.add_item(cart, CartItemIn(product_id=make_product("A").id))
        cart = carts.add_item(cart, CartItemIn(product_id=make_product("B").id))
        carts.set_promo_code(cart, "SPRING")

        cart = carts.remove_item(cart, cart.items[0].id)
        assert len(cart.items) == 1
        assert len(carts.remove_item(cart, 12345).items) == 1

        cart = carts.clear(cart)
        assert cart.items == []
        assert cart.promo_code is None


class TestResolvedProducts:
    def test_live_prices_and_missing_products(self, db, carts, make_product):
        kept = make_product("Kept", price="10.50")
        gone = make_product("Gone", price="99.00")
        cart = carts.get_or_create(session_id="s1")
        carts.add_item(cart, CartItemIn(product_id=kept.id, quantity=2))
        carts.add_item(cart, CartItemIn(product_id=gone.id, quantity=1))

        db.delete(gone)
        kept.price_current = Decimal("12.00")
        db.commit()

        view = carts.with_resolved_products(cart)

        assert [line["product"]["name"] for line in view["items"]] == ["Kept"]
        assert view["items"][0]["line_total"] == Decimal("24.00")
        assert view["subtotal"] == Decimal("24.00")


class TestPurge:
    def test_only_expired_carts_are_purged(self, db, carts, make_product):
        old = carts.get_or_create(session_id="old")
        carts.add_item(old, CartItemIn(product_id=make_product().id))
        carts.get_or_create(session_id="fresh")

        old.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()

        assert carts.purge_expired() == 1
        assert [c.session_id for c in db.query(CartModel).all()] == ["fresh"]
