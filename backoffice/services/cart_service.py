# backoffice/services/cart_service.py
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from backoffice.data.models.cart import CartModel
from backoffice.data.models.cart_item import CartItemModel
from backoffice.domain.errors import InvalidError, NotFoundError
from backoffice.domain.schemas import CartItemIn
from backoffice.repos.cart_repo import CartRepo
from backoffice.repos.product_repo import ProductRepo
from backoffice.services.pricing_service import money
from backoffice.services.product_service import ProductService
from backoffice.utils.settings import CART_TTL_SECONDS
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk przypisany do sesji albo do użytkownika (dokładnie jeden klucz).

    commands (add, set_quantity, remove, clear) modyfikują stan,
    query (with_resolved_products) tylko odczyt.
    Koszyk trzyma referencje do produktów, ceny są zawsze aktualne.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def get_or_create(self, session_id: str | None = None, user_id: int | None = None) -> CartModel:
        if (session_id is None) == (user_id is None):
            raise InvalidError(
                "Exactly one of session_id and user_id is required",
                details={"session_id": session_id, "user_id": user_id},
            )

        cart = self.repo.get_by_session(session_id) if session_id is not None else self.repo.get_by_user(user_id)
        if cart:
            return cart

        # TTL liczony od utworzenia, nie odświeżany przy kolejnych akcjach
        expires = datetime.now(timezone.utc) + timedelta(seconds=CART_TTL_SECONDS)
        created = self.repo.create_cart(CartModel(session_id=session_id, user_id=user_id, expires_at=expires))

        logger.info(f"Created cart {created.id} (session={session_id}, user={user_id})")
        return created

    # commands
    def add_item(self, cart: CartModel, item: CartItemIn) -> CartModel:
        if not self.products.get(item.product_id):
            raise NotFoundError("Product", id=item.product_id)

        existing = next(
            (line for line in cart.items if line.product_id == item.product_id and line.variant == item.variant),
            None,
        )

        if existing:
            logger.info(
                f"Product {item.product_id} already in cart {cart.id}, "
                f"quantity {existing.quantity} -> {existing.quantity + item.quantity}"
            )
            existing.quantity += item.quantity
        else:
            logger.info(f"Adding product {item.product_id} to cart {cart.id}")
            cart.items.append(
                CartItemModel(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    variant=item.variant,
                    attributes=dict(item.attributes),
                )
            )

        return self.repo.save(cart)

    def set_quantity(self, cart: CartModel, item_id: int, quantity: int) -> CartModel:
        line = self.repo.get_item(cart, item_id)
        if not line:
            raise NotFoundError("Cart item", id=item_id)

        if quantity <= 0:
            cart.items.remove(line)
            logger.info(f"Removed line {item_id} from cart {cart.id} (quantity {quantity})")
        else:
            line.quantity = quantity

        return self.repo.save(cart)

    def remove_item(self, cart: CartModel, item_id: int) -> CartModel:
        line = self.repo.get_item(cart, item_id)
        if line:
            cart.items.remove(line)
            logger.info(f"Removed line {item_id} from cart {cart.id}")
        return self.repo.save(cart)

    def clear(self, cart: CartModel) -> CartModel:
        cart.items.clear()
        cart.promo_code = None
        logger.info(f"Cleared cart {cart.id}")
        return self.repo.save(cart)

    def set_promo_code(self, cart: CartModel, promo_code: str | None) -> CartModel:
        cart.promo_code = promo_code or None
        return self.repo.save(cart)

    def purge_expired(self, now: datetime | None = None) -> int:
        removed = self.repo.delete_expired(now or datetime.now(timezone.utc))
        if removed:
            logger.info(f"Purged {removed} expired carts")
        return removed

    def delete_session_cart(self, session_id: str) -> int:
        return self.repo.delete_by_session(session_id)

    # query
    def with_resolved_products(self, cart: CartModel) -> Dict[str, Any]:
        products = {p.id: p for p in self.products.get_many({line.product_id for line in cart.items})}

        lines = []
        for line in cart.items:
            product = products.get(line.product_id)
            if product is None:
                # produkt usuniety z katalogu - linia pomijana bez bledu
                continue
            lines.append(
                {
                    "id": line.id,
                    "product": ProductService.summary(product),
                    "quantity": line.quantity,
                    "variant": line.variant,
                    "attributes": line.attributes or {},
                    "line_total": money(product.price_current * line.quantity),
                }
            )

        return {
            "cart_id": cart.id,
            "session_id": cart.session_id,
            "user_id": cart.user_id,
            "items": lines,
            "promo_code": cart.promo_code,
            "subtotal": money(sum((line["line_total"] for line in lines), Decimal("0"))),
            "expires_at": cart.expires_at,
        }
