"""
app/scheduler/jobs.py

APScheduler-based scheduler for periodic vendor enrichment.

Source discovery
----------------
One cron job is registered per active ``VendorSource`` row that carries a
``scraper_key`` and a five-field cron ``schedule`` (e.g. ``0 3 * * 1``).
Rows with an invalid expression are skipped with a WARNING log. If the
tables do not exist yet (first boot before migrations) discovery fails
softly and the scheduler starts with no jobs.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from contextlib import contextmanager
from typing import Iterator

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from app.services.enrichment_service import EnrichmentService, get_enrichment_service
from db.repositories.vendor_source_repository import VendorSourceRepository
from db.session import SessionLocal

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------


@contextmanager
def _session_scope(session_factory: SessionFactory = SessionLocal) -> Iterator[Session]:
    """Yield a fresh session and ensure it is closed on exit."""
    session: Session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Job: vendor source enrichment
# ---------------------------------------------------------------------------


def run_vendor_source(
    source_id: uuid.UUID,
    *,
    session_factory: SessionFactory = SessionLocal,
    service_factory: Callable[[], EnrichmentService] = get_enrichment_service,
) -> None:
    """
    Run one scheduled enrichment job. Failures are logged, never raised into APScheduler.
    """
    logger.info("Scheduler: enrichment starting source_id=%s", source_id)
    with _session_scope(session_factory) as db:
        try:
            summary = service_factory().run_source(db=db, source_id=source_id)
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.warning("Scheduler: enrichment failed source_id=%s: %s", source_id, exc)
            return
    logger.info(
        "Scheduler: enrichment complete source_id=%s job_id=%s skus_enriched=%d",
        source_id,
        summary.job_id,
        summary.stats.skus_enriched,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(
    session_factory: SessionFactory = SessionLocal,
    service_factory: Callable[[], EnrichmentService] = get_enrichment_service,
) -> BackgroundScheduler:
    """
    Build and register one cron job per scheduled vendor source.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    try:
        with _session_scope(session_factory) as db:
            sources = [
                (source.id, source.name, source.schedule)
                for source in VendorSourceRepository(db).list_scheduled_sources()
            ]
    except Exception as exc:  # noqa: BLE001
        logger.warning("Vendor source discovery failed; scheduler starts empty: %s", exc)
        return scheduler

    for source_id, name, schedule in sources:
        try:
            trigger = CronTrigger.from_crontab(schedule, timezone="UTC")
        except ValueError as exc:
            logger.warning(
                "Skipping vendor source %r: invalid schedule %r (%s)", name, schedule, exc
            )
            continue
        scheduler.add_job(
            run_vendor_source,
            trigger=trigger,
            args=[source_id],
            kwargs={"session_factory": session_factory, "service_factory": service_factory},
            id=f"enrich_{source_id}",
            name=f"Vendor enrichment: {name}",
            replace_existing=True,
            misfire_grace_time=3600,
            max_instances=1,
        )

    return scheduler
