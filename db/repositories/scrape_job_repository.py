"""
Repository for scrape job lifecycle, log lines, counters and error entries.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.scrape_job import ScrapeJob, ScrapeJobStatus

JOB_COUNTER_FIELDS = ("products_found", "products_created", "products_updated", "skus_created")


def format_log_line(message: str, *, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%H:%M:%S")
    return f"[{stamp}] {message}\n"


class ScrapeJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_running_job(self, *, vendor_source_id: uuid.UUID) -> ScrapeJob:
        job = ScrapeJob(
            vendor_source_id=vendor_source_id,
            status=ScrapeJobStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
            errors=[],
            log="",
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID) -> ScrapeJob | None:
        return self._session.get(ScrapeJob, job_id)

    def list_jobs(
        self,
        *,
        vendor_source_id: uuid.UUID | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ScrapeJob]:
        stmt: Select[tuple[ScrapeJob]] = select(ScrapeJob)

        if vendor_source_id:
            stmt = stmt.where(ScrapeJob.vendor_source_id == vendor_source_id)
        if status:
            stmt = stmt.where(ScrapeJob.status == status)

        stmt = (
            stmt.order_by(ScrapeJob.created_at.desc())
            .limit(max(1, limit))
            .offset(max(0, offset))
        )
        return list(self._session.scalars(stmt).all())

    def append_log(
        self,
        *,
        job_id: uuid.UUID,
        message: str,
        counters: Mapping[str, Any] | None = None,
    ) -> ScrapeJob | None:
        """
        Append a `[HH:MM:SS] message` line; known counters in `counters` are stored too.
        """

        job = self.get_job(job_id)
        if job is None:
            return None
        job.log = (job.log or "") + format_log_line(message)
        for name in JOB_COUNTER_FIELDS:
            value = (counters or {}).get(name)
            if value is not None:
                setattr(job, name, int(value))
        return job

    def add_error(self, *, job_id: uuid.UUID, message: str) -> ScrapeJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        entry = {"message": message, "time": datetime.now(timezone.utc).isoformat()}
        # Reassign so the JSONB column is flagged dirty.
        job.errors = [*(job.errors or []), entry]
        return job

    def mark_completed(self, *, job_id: uuid.UUID) -> ScrapeJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = ScrapeJobStatus.COMPLETED
        job.completed_at = datetime.now(timezone.utc)
        return job

    def mark_failed(self, *, job_id: uuid.UUID, error_message: str) -> ScrapeJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = ScrapeJobStatus.FAILED
        job.completed_at = datetime.now(timezone.utc)
        job.errors = [
            *(job.errors or []),
            {"message": error_message, "time": datetime.now(timezone.utc).isoformat()},
        ]
        return job
