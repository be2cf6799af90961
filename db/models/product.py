"""
db/models/product.py

Catalog products and their SKU variants.

Products and SKUs are created by catalog ingestion; enrichment only fills
descriptions, media and attributes on rows that already exist.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.media_asset import MediaAsset


class Product(Base, TimestampMixin):
    __tablename__ = "products"

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
    name: Mapped[str] = mapped_column(Text, nullable=False)
    collection: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Brand-prefixed collection, e.g. 'Kraus Timberland'",
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    description_long: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_short: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    skus: Mapped[list["Sku"]] = relationship(back_populates="product")
    media_assets: Mapped[list["MediaAsset"]] = relationship(back_populates="product")

    __table_args__ = (
        UniqueConstraint(
            "vendor_id",
            "collection",
            "name",
            name="products_vendor_collection_name_unique",
        ),
        Index("ix_products_vendor_id", "vendor_id"),
        Index("ix_products_vendor_collection", "vendor_id", "collection"),
    )


class Sku(Base, TimestampMixin):
    __tablename__ = "skus"

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
    vendor_sku: Mapped[str] = mapped_column(Text, nullable=False)
    internal_sku: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    variant_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    product: Mapped[Product] = relationship(back_populates="skus")

    __table_args__ = (Index("ix_skus_product_id", "product_id"),)
