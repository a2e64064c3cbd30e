# backoffice/data/models/menu.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Index

from backoffice.data.database import Base


class MenuItemModel(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    parent_id = Column(Integer, ForeignKey("menu_items.id"), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    url = Column(String(500), nullable=True)
    icon = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default="internal")  # internal, external, divider, header
    is_new_tab = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("ix_menu_items_parent_order", "parent_id", "order"),)
