from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, JSON
from sqlalchemy.orm import relationship

from backoffice.data.database import Base


class OrderItemModel(Base):
    """Snapshot pozycji zamówienia zamrożony w chwili jego złożenia."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    product_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)
    product_slug = Column(String(100), nullable=True)
    product_image = Column(String(500), nullable=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)

    variant = Column(String(255), nullable=True)
    attributes = Column(JSON, nullable=False, default=dict)

    order = relationship("OrderModel", back_populates="items")
