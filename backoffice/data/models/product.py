from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Numeric, JSON

from backoffice.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    category_id = Column(Integer, nullable=True, index=True)

    price_current = Column(Numeric(12, 2), nullable=False)
    price_old = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(10), nullable=False, default="UAH")

    stock = Column(Integer, nullable=False, default=0)
    # [{"url": ..., "alt": ..., "order": 0, "is_main": false}]
    images = Column(JSON, nullable=False, default=list)
    sku = Column(String(100), nullable=True)
    order = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    # flagi witryny: polecane, promocja, nowość
    is_featured = Column(Boolean, nullable=False, default=False)
    is_on_sale = Column(Boolean, nullable=False, default=False)
    is_new = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def main_image(self) -> str | None:
        if not self.images:
            return None
        main = next((img for img in self.images if img.get("is_main")), self.images[0])
        return main.get("url")
