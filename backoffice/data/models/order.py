from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Boolean, Text, JSON, Index
from sqlalchemy.orm import relationship

from backoffice.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(50), nullable=False, unique=True, index=True)

    # {"first_name", "last_name", "email", "phone", "company"}
    customer = Column(JSON, nullable=False)
    # {"country", "city", "street", "building", "apartment", "postal_code", "notes"}
    delivery_address = Column(JSON, nullable=True)

    status = Column(String(20), nullable=False, default="pending")
    payment_method = Column(String(20), nullable=False)
    delivery_method = Column(String(20), nullable=False)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    delivery_cost = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(10), nullable=False)

    notes = Column(Text, nullable=True)
    promo_code = Column(String(100), nullable=True)

    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    # false -> true tylko raz, dispatcher nie wysyla ponownie
    is_sent_to_telegram = Column(Boolean, nullable=False, default=False)
    sent_to_telegram_at = Column(DateTime(timezone=True), nullable=True)

    tracking_number = Column(String(100), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    extra_metadata = Column("metadata", JSON, nullable=False, default=dict)

    # dane karty - osobno od metadata, nigdy nie wracają w API ani w logach
    payment_details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
        lazy="selectin",
    )

    __table_args__ = (Index("ix_orders_status_created", "status", "created_at"),)
