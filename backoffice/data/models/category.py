# backoffice/data/models/category.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Table, Index
from sqlalchemy.orm import relationship

from backoffice.data.database import Base

# dodatkowi rodzice kategorii (cross-listing w kilku galeziach)
category_parents = Table(
    "category_parents",
    Base.metadata,
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("parent_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    icon = Column(String(255), nullable=True)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    meta_keywords = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    extra_parents = relationship(
        "CategoryModel",
        secondary=category_parents,
        primaryjoin=id == category_parents.c.category_id,
        secondaryjoin=id == category_parents.c.parent_id,
        lazy="selectin",
    )

    __table_args__ = (Index("ix_categories_parent_order", "parent_id", "order"),)

    @property
    def extra_parent_ids(self) -> list[int]:
        return sorted(p.id for p in self.extra_parents)
