# backoffice/services/order_service.py
import random
import time
from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from backoffice.data.models.order import OrderModel
from backoffice.data.models.order_item import OrderItemModel
from backoffice.domain.enums import DispatchOutcome, OrderStatus, is_expected_transition
from backoffice.domain.errors import ConflictError, NotFoundError
from backoffice.domain.schemas import OrderCreate, OrderUpdate, PaymentCardIn
from backoffice.repos.cart_repo import CartRepo
from backoffice.repos.order_repo import OrderRepo
from backoffice.repos.product_repo import ProductRepo
from backoffice.services.notification_service import NotificationDispatcher, NotificationService
from backoffice.services.pricing_service import PricedOrder, PricingService, money
from backoffice.utils.retry import OrderNumberCollision, order_number_retry
from backoffice.utils.settings import DEFAULT_CURRENCY
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def payment_details_from(card: PaymentCardIn | None, legacy: Dict[str, Any] | None = None) -> Dict[str, Any] | None:
    """
    Tylko to, co potrzebne do obsługi zamówienia: ostatnie 4 cyfry,
    data ważności i właściciel. CVC nie jest zapisywany.
    """
    if card is not None:
        number = card.card_number.get_secret_value()
        expiry, holder = card.expiry, card.cardholder_name
    elif legacy:
        number = str(legacy.get("cardNumber") or legacy.get("card_number") or "")
        expiry = legacy.get("expiry")
        holder = legacy.get("cardholderName") or legacy.get("cardholder_name")
    else:
        return None

    digits = "".join(ch for ch in number if ch.isdigit())
    details = {"card_last4": digits[-4:] or None, "expiry": expiry, "cardholder_name": holder}
    return {k: v for k, v in details.items() if v} or None


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    Zamówienie to snapshot cen z chwili złożenia. Powiadomienie idzie
    w tle (Celery), błąd powiadomienia nie blokuje zamówienia.
    """

    def __init__(
        self,
        db: Session,
        notifier: Callable[[int], Any] | None = None,
        dispatcher_factory: Callable[[Session], NotificationDispatcher] | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)
        self.pricing = PricingService()
        self.notifier = notifier or NotificationService.send_order_notification
        self.dispatcher_factory = dispatcher_factory or NotificationDispatcher

    # commands
    def create_order(
        self,
        cmd: OrderCreate,
        session_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> OrderModel:
        """
        Use Case: Tworzenie zamówienia.

        1. Wycenia pozycje po aktualnych cenach produktów
        2. Zapisuje zamówienie (ponawia przy kolizji numeru)
        3. Czyści koszyk sesji
        4. Wysyła powiadomienie (async)
        """
        priced = self.pricing.price_order(cmd.items, self.products.get_many)
        total = self.pricing.order_total(priced.subtotal, cmd.discount, cmd.delivery_cost)

        metadata = dict(cmd.metadata)
        legacy_card = metadata.pop("card", None)
        payment_details = payment_details_from(cmd.payment_card, legacy_card if isinstance(legacy_card, dict) else None)

        @order_number_retry()
        def persist():
            order = self._build_order(cmd, priced, total, metadata, payment_details)
            order.ip_address = ip_address
            order.user_agent = user_agent
            return self.repo.create_order(order)

        try:
            created = persist()
        except OrderNumberCollision as e:
            logger.error(f"Could not allocate a unique order number, last tried {e.order_number}")
            raise ConflictError("Could not allocate a unique order number", details={"order_number": e.order_number}) from e
        logger.info(f"Order {created.order_number} (id {created.id}) created, total {created.total} {created.currency}")

        if session_id:
            self.carts.delete_by_session(session_id)

        self._notify(created.id)
        return created

    def update_order(self, order_id: int, patch: OrderUpdate) -> OrderModel:
        order = self.get_order(order_id)
        fields = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or key not in ("status", "is_paid")
        }

        new_status = fields.get("status")
        if new_status and not is_expected_transition(order.status, new_status):
            # tabela przejść nie jest wymuszana, admin może poprawić status ręcznie
            logger.warning(f"Order {order.order_number}: unexpected status change {order.status} -> {new_status}")

        if fields.get("is_paid") and not fields.get("paid_at") and not order.paid_at:
            fields["paid_at"] = datetime.now(timezone.utc)

        for key, value in fields.items():
            setattr(order, key, value)

        saved = self.repo.save(order)
        logger.info(f"Order {order.order_number} updated: {sorted(fields)}")
        return saved

    def remove_order(self, order_id: int) -> Dict[str, Any]:
        order = self.get_order(order_id)
        snapshot = {"id": order.id, "order_number": order.order_number, "status": order.status}
        self.repo.delete(order)
        logger.info(f"Order {snapshot['order_number']} deleted")
        return snapshot

    def resend_notification(self, order_id: int) -> DispatchOutcome:
        """Ręczna, idempotentna ponowna wysyłka. Wysłane zamówienie nie idzie drugi raz."""
        self.get_order(order_id)
        outcome = self.dispatcher_factory(self.db).dispatch_order_created(order_id)
        logger.info(f"Manual dispatch of order {order_id}: {outcome.value}")
        return outcome

    # query
    def get_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order", id=order_id)
        return order

    def get_by_number(self, order_number: str) -> OrderModel:
        order = self.repo.get_by_number(order_number)
        if not order:
            raise NotFoundError("Order", order_number=order_number)
        return order

    def list_orders(self, include_cancelled: bool = False) -> List[OrderModel]:
        return self.repo.list_orders(exclude_status=None if include_cancelled else OrderStatus.CANCELLED.value)

    def statistics(self) -> Dict[str, Any]:
        orders = self.repo.list_orders()
        total = len(orders)

        by_status = Counter(o.status for o in orders)
        revenue = money(sum((Decimal(str(o.total)) for o in orders if o.is_paid), Decimal("0")))

        return {
            "total": total,
            "by_status": dict(by_status),
            "total_revenue": revenue,
            # średnia liczona po wszystkich zamówieniach, nie tylko opłaconych
            "average_order_value": money(revenue / total) if total else money(0),
        }

    # helpers
    def _build_order(self, cmd: OrderCreate, priced: PricedOrder, total: Decimal,
                     metadata: Dict[str, Any], payment_details: Dict[str, Any] | None) -> OrderModel:
        order = OrderModel(
            order_number=generate_order_number(),
            customer=cmd.customer.model_dump(),
            delivery_address=cmd.delivery_address.model_dump() if cmd.delivery_address else None,
            status=OrderStatus.PENDING.value,
            payment_method=cmd.payment_method,
            delivery_method=cmd.delivery_method,
            subtotal=priced.subtotal,
            discount=money(cmd.discount),
            delivery_cost=money(cmd.delivery_cost),
            total=total,
            currency=cmd.currency or DEFAULT_CURRENCY,
            notes=cmd.notes,
            promo_code=cmd.promo_code,
            extra_metadata=metadata,
            payment_details=payment_details,
        )
        order.items = [
            OrderItemModel(
                position=position,
                product_id=line.product_id,
                product_name=line.product_name,
                product_slug=line.product_slug,
                product_image=line.product_image,
                quantity=line.quantity,
                price=line.price,
                discount=line.discount,
                total=line.total,
                variant=line.variant,
                attributes=line.attributes,
            )
            for position, line in enumerate(priced.lines)
        ]
        return order

    def _notify(self, order_id: int):
        try:
            self.notifier(order_id)
        except Exception:
            # broker niedostępny itp. - zamówienie już zapisane, resend ręcznie
            logger.exception(f"Could not schedule notification for order {order_id}")
