"""
db/models/media_asset.py

Product and SKU images.

Product-level rows are unique on (product_id, asset_type, sort_order) and
SKU-level rows on (product_id, sku_id, asset_type, sort_order); both are
partial unique indexes so re-runs overwrite instead of duplicating.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.product import Product


class MediaAssetType:
    PRIMARY = "primary"
    LIFESTYLE = "lifestyle"
    ALTERNATE = "alternate"


class MediaAsset(Base):
    __tablename__ = "media_assets"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("products.id"),
        nullable=False,
    )
    sku_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("skus.id"),
        nullable=True,
    )
    asset_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=MediaAssetType.PRIMARY,
        comment="primary, lifestyle, alternate",
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    original_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    product: Mapped["Product"] = relationship(back_populates="media_assets")

    __table_args__ = (
        Index("ix_media_assets_product_id", "product_id"),
        Index("ix_media_assets_product_type", "product_id", "asset_type"),
        Index(
            "uq_media_assets_product_slot",
            "product_id",
            "asset_type",
            "sort_order",
            unique=True,
            postgresql_where=text("sku_id IS NULL"),
        ),
        Index(
            "uq_media_assets_sku_slot",
            "product_id",
            "sku_id",
            "asset_type",
            "sort_order",
            unique=True,
            postgresql_where=text("sku_id IS NOT NULL"),
        ),
    )
