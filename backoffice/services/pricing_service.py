# backoffice/services/pricing_service.py
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Optional

from backoffice.domain.errors import InvalidError
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_id(raw) -> Optional[int]:
    """Dodatnie ID z inta albo ze stringa z cyframi, inaczej None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    if isinstance(raw, str):
        text = raw.strip()
        if text.isdigit() and int(text) > 0:
            return int(text)
    return None


@dataclass
class PricedLine:
    product_id: int
    product_name: str
    product_slug: Optional[str]
    product_image: Optional[str]
    quantity: int
    price: Decimal
    total: Decimal
    discount: Decimal = Decimal("0.00")
    variant: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PricedOrder:
    lines: List[PricedLine]
    subtotal: Decimal


class PricingService:
    """
    Ceny pozycji zamówienia liczone z aktualnej ceny produktu w chwili
    składania zamówienia (koszyk trzyma tylko referencje i ilości).
    """

    def price_order(self, items: Iterable, product_lookup: Callable[[List[int]], list]) -> PricedOrder:
        items = list(items)
        if not items:
            raise InvalidError("Order must contain at least one item")

        ids, invalid = [], []
        for index, item in enumerate(items):
            product_id = parse_id(item.product_id)
            if product_id is None:
                invalid.append({"index": index, "product_id": str(item.product_id)})
            ids.append(product_id)

        if invalid:
            raise InvalidError("Invalid product IDs", details={"invalid": invalid})

        unique_ids = list(dict.fromkeys(ids))
        products = {p.id: p for p in product_lookup(unique_ids)}

        missing = [i for i in unique_ids if i not in products]
        if missing:
            logger.warning(f"Products not found while pricing order: {missing}")
            raise InvalidError("Some products not found", details={"missing": missing})

        lines = []
        for product_id, item in zip(ids, items):
            product = products[product_id]
            price = money(product.price_current)
            lines.append(
                PricedLine(
                    product_id=product_id,
                    product_name=product.name,
                    product_slug=product.slug,
                    product_image=product.main_image,
                    quantity=item.quantity,
                    price=price,
                    total=money(price * item.quantity),
                    variant=item.variant,
                    attributes=dict(item.attributes or {}),
                )
            )

        subtotal = money(sum((line.total for line in lines), Decimal("0")))
        return PricedOrder(lines=lines, subtotal=subtotal)

    def order_total(self, subtotal, discount=0, delivery_cost=0) -> Decimal:
        subtotal, discount, delivery_cost = money(subtotal), money(discount), money(delivery_cost)

        if discount < 0 or delivery_cost < 0:
            raise InvalidError(
                "Discount and delivery cost must be non-negative",
                details={"discount": str(discount), "delivery_cost": str(delivery_cost)},
            )

        if discount > subtotal + delivery_cost:
            raise InvalidError(
                "Discount exceeds order value",
                details={"discount": str(discount), "subtotal": str(subtotal), "delivery_cost": str(delivery_cost)},
            )

        return subtotal - discount + delivery_cost
