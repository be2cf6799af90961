"""
db/models/vendor_source.py

Configured vendor websites and the enrichment adapter bound to each.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class VendorSource(Base, TimestampMixin):
    __tablename__ = "vendor_sources"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vendors.id"),
        nullable=False,
    )
    source_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="website",
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    base_url: Mapped[str] = mapped_column(Text, nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment="delay_ms, brand_prefix and other adapter options",
    )
    scraper_key: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Vendor adapter key or 'module.path:factory'",
    )
    schedule: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Five-field cron expression",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_scraped_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (Index("ix_vendor_sources_vendor_id", "vendor_id"),)
