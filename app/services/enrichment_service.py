"""
app/services/enrichment_service.py

Service orchestration for vendor catalog enrichment jobs.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from functools import lru_cache

from sqlalchemy.orm import Session

from app.enrichment.adapters import AdapterRegistry
from app.enrichment.browser import launch_browser
from app.enrichment.config import (
    EnrichmentSettings,
    build_vendor_source_config,
    get_enrichment_settings,
    load_vendor_profiles,
)
from app.enrichment.errors import VendorSourceNotFoundError
from app.enrichment.logging_utils import log_event
from app.enrichment.orchestrator import BrowserLauncher, EnrichmentOrchestrator
from app.enrichment.storage import SQLAlchemyCatalogStorage, SQLAlchemyJobLog
from app.enrichment.types import EnrichmentRunSummary
from db.models.scrape_job import ScrapeJob, ScrapeJobStatus
from db.repositories.scrape_job_repository import ScrapeJobRepository
from db.repositories.vendor_source_repository import VendorSourceRepository

logger = logging.getLogger(__name__)


class EnrichmentService:
    """
    Resolves a vendor source to its adapter and runs one tracked enrichment job.
    """

    def __init__(
        self,
        *,
        settings: EnrichmentSettings | None = None,
        registry: AdapterRegistry | None = None,
        browser_launcher: BrowserLauncher = launch_browser,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_enrichment_settings()
        if registry is None:
            registry = AdapterRegistry(
                profiles=load_vendor_profiles(config_path=self._settings.vendor_config_path)
            )
        self._registry = registry
        self._browser_launcher = browser_launcher
        self._sleep = sleep

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    def run_source(self, *, db: Session, source_id: uuid.UUID) -> EnrichmentRunSummary:
        """
        Run enrichment for one vendor source and record it as a scrape job.

        Config problems raise before a job row exists. Failures after the job
        is created mark it failed and propagate.
        """

        sources = VendorSourceRepository(db)
        source = sources.get_source(source_id)
        if source is None:
            raise VendorSourceNotFoundError(f"Vendor source '{source_id}' not found.")

        profile = self._registry.get_profile(source.scraper_key or "")
        source_config = build_vendor_source_config(
            vendor_id=source.vendor_id,
            scraper_key=source.scraper_key,
            config=source.config,
            profile=profile,
            name=source.name,
            source_id=source.id,
            base_url=source.base_url,
            default_delay_ms=self._settings.default_delay_ms,
        )
        adapter = self._registry.create_adapter(
            source=source_config,
            settings=self._settings,
            sleep=self._sleep,
        )

        jobs = ScrapeJobRepository(db)
        job = jobs.create_running_job(vendor_source_id=source.id)
        db.commit()
        job_id = job.id
        log_event(
            logger,
            logging.INFO,
            "enrichment_job_started",
            job_id=job_id,
            source_id=source.id,
            scraper_key=source_config.scraper_key,
        )

        orchestrator = EnrichmentOrchestrator(
            settings=self._settings,
            storage=SQLAlchemyCatalogStorage(db),
            job_log=SQLAlchemyJobLog(db),
            adapter=adapter,
            browser_launcher=self._browser_launcher,
        )
        try:
            stats = orchestrator.run(job_id, source_config)
        except Exception as exc:
            db.rollback()
            jobs.mark_failed(job_id=job_id, error_message=str(exc))
            db.commit()
            log_event(
                logger,
                logging.ERROR,
                "enrichment_job_failed",
                job_id=job_id,
                source_id=source.id,
                error=str(exc),
            )
            raise

        jobs.mark_completed(job_id=job_id)
        sources.touch_last_scraped(source.id)
        db.commit()
        log_event(logger, logging.INFO, "enrichment_job_completed", job_id=job_id, **stats.as_payload())

        return EnrichmentRunSummary(
            job_id=job_id,
            vendor_source_id=source.id,
            scraper_key=source_config.scraper_key,
            status=ScrapeJobStatus.COMPLETED,
            stats=stats,
        )

    def list_jobs(
        self,
        *,
        db: Session,
        vendor_source_id: uuid.UUID | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ScrapeJob]:
        return ScrapeJobRepository(db).list_jobs(
            vendor_source_id=vendor_source_id,
            status=status,
            limit=limit,
            offset=offset,
        )


@lru_cache(maxsize=1)
def get_enrichment_service() -> EnrichmentService:
    """
    Build and cache enrichment service.
    """

    return EnrichmentService()
