"""
SQLAlchemy-backed catalog storage and job log.

Every write runs in its own transaction so a failure in one product group
never rolls back groups that were already merged.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.enrichment.logging_utils import log_event
from app.enrichment.storage.base import CatalogStorage, JobLog, MediaAssetInput
from app.enrichment.types import SkuRecord
from db.repositories.catalog_repository import CatalogRepository
from db.repositories.scrape_job_repository import ScrapeJobRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _commit(session: Session, operation: str, write: Callable[[], T]) -> T:
    try:
        result = write()
        session.commit()
        return result
    except SQLAlchemyError as exc:
        session.rollback()
        log_event(logger, logging.ERROR, "storage_write_failed", operation=operation, error=str(exc))
        raise


class SQLAlchemyCatalogStorage(CatalogStorage):
    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = CatalogRepository(session)

    def fetch_vendor_skus(self, *, vendor_id: uuid.UUID, brand_prefix: str) -> list[SkuRecord]:
        rows = self._repository.list_vendor_skus(vendor_id=vendor_id, brand_prefix=brand_prefix)
        return [
            SkuRecord(
                sku_id=row.sku_id,
                vendor_sku=row.vendor_sku,
                internal_sku=row.internal_sku,
                variant_name=row.variant_name,
                product_id=row.product_id,
                product_name=row.name,
                collection=row.collection,
                existing_description=row.description_long,
            )
            for row in rows
        ]

    def update_product_description(self, *, product_id: uuid.UUID, description: str) -> bool:
        return _commit(
            self._session,
            "update_product_description",
            lambda: self._repository.set_description_if_empty(
                product_id=product_id,
                description=description,
            ),
        )

    def upsert_media_asset(self, asset: MediaAssetInput) -> None:
        _commit(
            self._session,
            "upsert_media_asset",
            lambda: self._repository.upsert_media_asset(
                product_id=asset.product_id,
                sku_id=asset.sku_id,
                asset_type=asset.asset_type,
                url=asset.url,
                original_url=asset.original_url,
                sort_order=asset.sort_order,
            ),
        )

    def upsert_sku_attribute(self, *, sku_id: uuid.UUID, attribute_slug: str, value: str) -> None:
        _commit(
            self._session,
            "upsert_sku_attribute",
            lambda: self._repository.upsert_sku_attribute(
                sku_id=sku_id,
                attribute_slug=attribute_slug,
                value=value,
            ),
        )


class SQLAlchemyJobLog(JobLog):
    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = ScrapeJobRepository(session)

    def append_log(
        self,
        job_id: uuid.UUID,
        message: str,
        payload: Mapping[str, Any] | None = None,
    ) -> None:
        log_event(logger, logging.INFO, "job_log", job_id=job_id, message=message)
        _commit(
            self._session,
            "append_log",
            lambda: self._repository.append_log(job_id=job_id, message=message, counters=payload),
        )

    def add_job_error(self, job_id: uuid.UUID, message: str) -> None:
        _commit(
            self._session,
            "add_job_error",
            lambda: self._repository.add_error(job_id=job_id, message=message),
        )
