"""
Storage layer interfaces for catalog enrichment.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.enrichment.types import SkuRecord


@dataclass(frozen=True)
class MediaAssetInput:
    product_id: uuid.UUID
    asset_type: str
    url: str
    original_url: str | None
    sort_order: int
    sku_id: uuid.UUID | None = None


class CatalogStorage(ABC):
    """
    Catalog reads and idempotent enrichment writes. Every write commits on its own.
    """

    @abstractmethod
    def fetch_vendor_skus(self, *, vendor_id: uuid.UUID, brand_prefix: str) -> list[SkuRecord]:
        """
        SKUs of `vendor_id` whose product collection starts with `brand_prefix` (case-sensitive).
        """

    @abstractmethod
    def update_product_description(self, *, product_id: uuid.UUID, description: str) -> bool:
        """
        Set the long description only when it is currently empty. Returns whether a row changed.
        """

    @abstractmethod
    def upsert_media_asset(self, asset: MediaAssetInput) -> None:
        """
        Insert or replace the asset at (product, sku, asset_type, sort_order).
        """

    @abstractmethod
    def upsert_sku_attribute(self, *, sku_id: uuid.UUID, attribute_slug: str, value: str) -> None:
        """
        Insert or replace one SKU attribute value. Unknown slugs and blank values are ignored.
        """


class JobLog(ABC):
    """
    Job lifecycle log collaborator.
    """

    @abstractmethod
    def append_log(
        self,
        job_id: uuid.UUID,
        message: str,
        payload: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Append a timestamped log line; `payload` carries structured job counters.
        """

    @abstractmethod
    def add_job_error(self, job_id: uuid.UUID, message: str) -> None:
        """
        Append one error entry to the job.
        """
