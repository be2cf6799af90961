"""
db/repositories/catalog_repository.py

Catalog reads and idempotent enrichment writes for products, SKUs,
media assets and SKU attributes.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Row, or_, select, text, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.models.attribute import Attribute, SkuAttribute
from db.models.media_asset import MediaAsset, MediaAssetType
from db.models.product import Product, Sku

_PRODUCT_SLOT_COLUMNS = ("product_id", "asset_type", "sort_order")
_SKU_SLOT_COLUMNS = ("product_id", "sku_id", "asset_type", "sort_order")


class CatalogRepository:
    """
    Repository over the catalog tables. Callers own the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_vendor_skus(
        self,
        *,
        vendor_id: uuid.UUID,
        brand_prefix: str,
    ) -> list[Row[Any]]:
        """
        SKU rows of `vendor_id` whose product collection starts with `brand_prefix`.

        The match is a case-sensitive LIKE prefix; wildcard characters in
        the prefix are escaped.
        """

        stmt = (
            select(
                Sku.id.label("sku_id"),
                Sku.vendor_sku,
                Sku.internal_sku,
                Sku.variant_name,
                Product.id.label("product_id"),
                Product.name,
                Product.collection,
                Product.description_long,
            )
            .join(Product, Product.id == Sku.product_id)
            .where(
                Product.vendor_id == vendor_id,
                Product.collection.startswith(brand_prefix, autoescape=True),
            )
            .order_by(Product.collection, Product.name, Sku.internal_sku)
        )
        return list(self._session.execute(stmt).all())

    def set_description_if_empty(self, *, product_id: uuid.UUID, description: str) -> bool:
        stmt = (
            update(Product)
            .where(
                Product.id == product_id,
                or_(Product.description_long.is_(None), Product.description_long == ""),
            )
            .values(description_long=description)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return bool(result.rowcount)

    def upsert_media_asset(
        self,
        *,
        product_id: uuid.UUID,
        url: str,
        asset_type: str = MediaAssetType.PRIMARY,
        original_url: str | None = None,
        sort_order: int = 0,
        sku_id: uuid.UUID | None = None,
    ) -> uuid.UUID:
        """
        Insert a media asset or overwrite the url of the row already in its slot.

        Product-level and SKU-level rows use separate partial unique indexes.
        """

        stmt = insert(MediaAsset).values(
            product_id=product_id,
            sku_id=sku_id,
            asset_type=asset_type,
            url=url,
            original_url=original_url,
            sort_order=sort_order,
        )
        if sku_id is None:
            stmt = stmt.on_conflict_do_update(
                index_elements=list(_PRODUCT_SLOT_COLUMNS),
                index_where=text("sku_id IS NULL"),
                set_={"url": stmt.excluded.url, "original_url": stmt.excluded.original_url},
            )
        else:
            stmt = stmt.on_conflict_do_update(
                index_elements=list(_SKU_SLOT_COLUMNS),
                index_where=text("sku_id IS NOT NULL"),
                set_={"url": stmt.excluded.url, "original_url": stmt.excluded.original_url},
            )
        return self._session.scalar(stmt.returning(MediaAsset.id))

    def get_attribute_id(self, slug: str) -> uuid.UUID | None:
        return self._session.scalar(select(Attribute.id).where(Attribute.slug == slug))

    def upsert_sku_attribute(self, *, sku_id: uuid.UUID, attribute_slug: str, value: str) -> bool:
        """
        Write one attribute value. Returns False when the value is blank or the slug is unknown.
        """

        cleaned = (value or "").strip()
        if not cleaned:
            return False
        attribute_id = self.get_attribute_id(attribute_slug)
        if attribute_id is None:
            return False

        stmt = insert(SkuAttribute).values(sku_id=sku_id, attribute_id=attribute_id, value=cleaned)
        stmt = stmt.on_conflict_do_update(
            index_elements=[SkuAttribute.sku_id, SkuAttribute.attribute_id],
            set_={"value": stmt.excluded.value},
        )
        self._session.execute(stmt)
        return True
