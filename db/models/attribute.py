"""
db/models/attribute.py

Attribute dictionary and per-SKU attribute values.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Attribute(Base):
    __tablename__ = "attributes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        comment="Key used by extractors, e.g. material, wear_layer, pei_rating",
    )
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_filterable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class SkuAttribute(Base):
    __tablename__ = "sku_attributes"

    sku_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("skus.id"),
        primary_key=True,
    )
    attribute_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("attributes.id"),
        primary_key=True,
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("ix_sku_attributes_attribute_id", "attribute_id"),)
