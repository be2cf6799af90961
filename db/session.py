"""
db/session.py

Lazily created catalog engine and session factory.

Nothing connects at import time; the engine is built on first use so
tests and CLI help never need a reachable database.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

POOL_DEFAULTS = {
    "DB_POOL_SIZE": ("pool_size", 5),
    "DB_MAX_OVERFLOW": ("max_overflow", 10),
    "DB_POOL_RECYCLE": ("pool_recycle", 1800),
}


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        "pool_pre_ping": True,
    }
    for env_name, (option, default) in POOL_DEFAULTS.items():
        raw = os.getenv(env_name)
        try:
            options[option] = int(raw) if raw is not None else default
        except ValueError:
            options[option] = default
    return options


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("The catalog requires a PostgreSQL database URL.")
    return create_engine(url, **_engine_options())


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def SessionLocal() -> Session:
    """Open a catalog session. Call sites use it like a sessionmaker."""
    global _session_factory
    if _session_factory is None:
        # enrichment commits after every write and keeps reading the same rows
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
