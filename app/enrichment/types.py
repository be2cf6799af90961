"""
Shared enrichment runtime data models.
"""

from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SkuRecord:
    """
    One catalog SKU row loaded for enrichment. Read-only for the pipeline.
    """

    sku_id: uuid.UUID
    vendor_sku: str
    internal_sku: str
    variant_name: str | None
    product_id: uuid.UUID
    product_name: str
    collection: str | None
    existing_description: str | None = None


@dataclass
class ProductGroup:
    """
    SKU variants sharing one vendor product page, keyed by (collection, name).
    """

    collection: str | None
    product_name: str
    product_id: uuid.UUID
    skus: list[SkuRecord] = field(default_factory=list)

    @property
    def key(self) -> tuple[str | None, str]:
        return (self.collection, self.product_name)

    @property
    def sku_count(self) -> int:
        return len(self.skus)

    @property
    def existing_description(self) -> str | None:
        return self.skus[0].existing_description if self.skus else None

    @property
    def label(self) -> str:
        return f"{self.collection or ''} / {self.product_name}"


@dataclass
class ExtractedProductData:
    """
    Images, description and specs read from one vendor product page.
    """

    images: list[str] = field(default_factory=list)
    description: str | None = None
    specs: dict[str, str] | None = None

    def has_data(self) -> bool:
        return bool(self.images or self.description or self.specs)


class GroupOutcome:
    MERGED = "merged"
    NOT_FOUND = "not_found"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class RunStats:
    """
    Run-scoped counters for one enrichment job invocation.
    """

    products_total: int = 0
    skus_enriched: int = 0
    skus_skipped: int = 0
    images_added: int = 0
    error_count: int = 0
    outcomes: Counter = field(default_factory=Counter)

    def as_payload(self) -> dict[str, Any]:
        return {
            "products_total": self.products_total,
            "skus_enriched": self.skus_enriched,
            "skus_skipped": self.skus_skipped,
            "images_added": self.images_added,
            "error_count": self.error_count,
            "outcomes": dict(self.outcomes),
        }


@dataclass(frozen=True)
class JobErrorEntry:
    message: str


@dataclass(frozen=True)
class EnrichmentRunSummary:
    """
    Outcome of one enrichment job as reported by the service layer.
    """

    job_id: uuid.UUID
    vendor_source_id: uuid.UUID
    scraper_key: str
    status: str
    stats: RunStats
