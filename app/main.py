from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


def _validate_env() -> None:
    """
    Fail fast on configuration the enrichment API cannot run without.

    Every problem is collected before raising so one restart fixes them all.
    """

    from app.enrichment.config import resolve_config_path
    from db.config import resolve_database_url

    problems: list[str] = []

    try:
        resolve_database_url()
    except RuntimeError as exc:
        problems.append(str(exc))

    vendor_config = os.getenv("ENRICH_VENDOR_CONFIG_PATH", "").strip()
    if vendor_config and not resolve_config_path(vendor_config).is_file():
        problems.append(f"ENRICH_VENDOR_CONFIG_PATH='{vendor_config}' does not point to a file.")

    if problems:
        raise RuntimeError(
            "Enrichment API configuration is invalid:\n" + "\n".join(f"  - {item}" for item in problems)
        )


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _scheduler_enabled() -> bool:
    return os.getenv("ENRICH_SCHEDULER_ENABLED", "true").strip().lower() in TRUE_VALUES


def _verify_catalog_database() -> None:
    """
    Check the catalog database answers and carries every mapped table.

    Migrations are never applied here; a missing table aborts startup.
    """

    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401  registers catalog tables on Base.metadata
    from db.base import Base
    from db.session import get_engine

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise RuntimeError("Catalog database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - set(sa_inspect(engine).get_table_names()))
    if missing:
        logger.critical("Catalog tables missing: %s. Run 'alembic upgrade head'.", ", ".join(missing))
        raise RuntimeError(f"Catalog schema incomplete, missing tables: {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Check the database, load vendor adapters, then run the scheduler for the app's lifetime."""
    from app.services.enrichment_service import get_enrichment_service

    _verify_catalog_database()
    adapters = get_enrichment_service().registry.keys()
    logger.info("Catalog database ready; vendor adapters: %s", ", ".join(adapters) or "none")

    if not _scheduler_enabled():
        yield
        return

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Enrichment scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Enrichment scheduler stopped")


def create_app() -> FastAPI:
    """
    Build the vendor enrichment API.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Vendor Enrichment API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import enrichment_router

    application.include_router(enrichment_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
