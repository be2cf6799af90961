"""
Enrichment orchestrator.

Loads a vendor's SKUs, groups them into products, walks each group through
the bound vendor adapter on one shared browser page and merges whatever was
found back into the catalog.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from app.enrichment.adapters.adapter import VendorAdapter
from app.enrichment.browser import BrowserSession, PageHandle, launch_browser
from app.enrichment.config.models import EnrichmentSettings, VendorSourceConfig
from app.enrichment.error_log import BoundedErrorLog
from app.enrichment.grouping import group_skus
from app.enrichment.images import classify_asset_type, prefer_product_shot
from app.enrichment.logging_utils import log_event
from app.enrichment.storage.base import CatalogStorage, JobLog, MediaAssetInput
from app.enrichment.types import ExtractedProductData, GroupOutcome, ProductGroup, RunStats

logger = logging.getLogger(__name__)

BrowserLauncher = Callable[[EnrichmentSettings], BrowserSession]


class EnrichmentOrchestrator:
    """
    Runs one enrichment job for one vendor source.

    Only browser launch and the initial SKU query may raise out of `run`;
    failures inside a product group are recorded and the loop moves on.
    """

    def __init__(
        self,
        *,
        settings: EnrichmentSettings,
        storage: CatalogStorage,
        job_log: JobLog,
        adapter: VendorAdapter,
        browser_launcher: BrowserLauncher = launch_browser,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._job_log = job_log
        self._adapter = adapter
        self._browser_launcher = browser_launcher

    def run(self, job_id: uuid.UUID, source: VendorSourceConfig) -> RunStats:
        stats = RunStats()
        brand = source.brand_prefix

        rows = self._storage.fetch_vendor_skus(vendor_id=source.vendor_id, brand_prefix=brand)
        self._append_log(job_id, f"Found {len(rows)} {brand} SKUs to enrich")
        if not rows:
            self._append_log(
                job_id,
                f"No {brand} SKUs found — run the catalog import first",
            )
            return stats

        groups = group_skus(rows)
        stats.products_total = len(groups)
        self._append_log(job_id, f"Grouped into {len(groups)} products")

        error_log = BoundedErrorLog(
            job_log=self._job_log,
            job_id=job_id,
            max_errors=self._settings.max_job_errors,
        )

        with self._browser_launcher(self._settings) as session:
            page = session.new_page(user_agent=self._adapter.profile.user_agent)
            for processed, group in enumerate(groups, start=1):
                outcome = self._process_group(page, group, stats, error_log)
                stats.outcomes[outcome] += 1

                if self._settings.progress_every > 0 and processed % self._settings.progress_every == 0:
                    self._append_log(
                        job_id,
                        f"Progress: {processed}/{len(groups)} products, "
                        f"{stats.images_added} images added",
                    )

        stats.error_count = error_log.count
        payload = {
            "products_found": stats.products_total,
            "products_updated": stats.skus_enriched,
            "outcomes": dict(stats.outcomes),
        }
        self._append_log(
            job_id,
            f"Complete. Products: {stats.products_total}, SKUs enriched: {stats.skus_enriched}, "
            f"Skipped: {stats.skus_skipped}, Images: {stats.images_added}, Errors: {stats.error_count}",
            payload,
        )
        log_event(
            logger,
            logging.INFO,
            "enrichment_run_completed",
            job_id=job_id,
            vendor=self._adapter.key,
            errors_dropped=error_log.dropped,
            **stats.as_payload(),
        )
        return stats

    def _append_log(self, job_id: uuid.UUID, message: str, payload: dict[str, Any] | None = None) -> None:
        try:
            self._job_log.append_log(job_id, message, payload)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.ERROR, "job_log_write_failed", job_id=job_id, message=message, error=str(exc))

    def _process_group(
        self,
        page: PageHandle,
        group: ProductGroup,
        stats: RunStats,
        error_log: BoundedErrorLog,
    ) -> str:
        try:
            result = self._adapter.find_product(page, group.product_name)
            if result.data is None:
                stats.skus_skipped += group.sku_count
                log_event(
                    logger,
                    logging.DEBUG,
                    "group_skipped",
                    product=group.label,
                    outcome=result.outcome,
                )
                return result.outcome
            self._merge(group, result.data, stats)
            return GroupOutcome.MERGED
        except Exception as exc:  # noqa: BLE001
            error_log.record(f"{group.label}: {exc}")
            stats.skus_skipped += group.sku_count
            return GroupOutcome.ERROR

    def _merge(self, group: ProductGroup, data: ExtractedProductData, stats: RunStats) -> None:
        if data.description and not group.existing_description:
            self._storage.update_product_description(
                product_id=group.product_id,
                description=data.description,
            )

        if data.images:
            ranked = prefer_product_shot(data.images, group.product_name)
            for index, url in enumerate(ranked[: self._settings.max_images]):
                self._storage.upsert_media_asset(
                    MediaAssetInput(
                        product_id=group.product_id,
                        asset_type=classify_asset_type(index, url),
                        url=url,
                        original_url=url,
                        sort_order=index,
                    )
                )
                stats.images_added += 1

        if data.specs:
            for sku in group.skus:
                for attribute_slug, value in data.specs.items():
                    if value:
                        self._storage.upsert_sku_attribute(
                            sku_id=sku.sku_id,
                            attribute_slug=attribute_slug,
                            value=value,
                        )
                stats.skus_enriched += 1
        else:
            stats.skus_enriched += group.sku_count
