from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, JSON, Index

from backoffice.data.database import Base


class IntegrationModel(Base):
    __tablename__ = "integrations"

    id = Column(Integer, primary_key=True)
    type = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="inactive", index=True)

    token = Column(String(500), nullable=True)
    api_key = Column(String(500), nullable=True)
    api_secret = Column(String(500), nullable=True)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    code = Column(String(500), nullable=True)

    # telegram
    bot_token = Column(String(500), nullable=True)
    chat_id = Column(String(100), nullable=True)
    group_code = Column(String(100), nullable=True)

    # facebook
    page_id = Column(String(100), nullable=True)
    app_id = Column(String(100), nullable=True)

    # keitaro
    tracking_script = Column(Text, nullable=True)
    tracking_url = Column(String(500), nullable=True)
    postback_url = Column(String(500), nullable=True)

    settings = Column(JSON, nullable=False, default=dict)
    credentials = Column(JSON, nullable=False, default=dict)
    token_expires_at = Column(DateTime(timezone=True), nullable=True)

    last_error = Column(Text, nullable=True)
    last_error_at = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    usage_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("ix_integrations_type_active", "type", "is_active"),)
