"""
Run-scoped, capped job error log.
"""

from __future__ import annotations

import logging
import uuid

from app.enrichment.logging_utils import log_event
from app.enrichment.storage.base import JobLog
from app.enrichment.types import JobErrorEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ERRORS = 30


class BoundedErrorLog:
    """
    Counts every error but persists only the first `max_errors` of them.
    """

    def __init__(
        self,
        *,
        job_log: JobLog,
        job_id: uuid.UUID,
        max_errors: int = DEFAULT_MAX_ERRORS,
    ) -> None:
        self._job_log = job_log
        self._job_id = job_id
        self._max_errors = max(0, max_errors)
        self.count = 0
        self.entries: list[JobErrorEntry] = []

    @property
    def dropped(self) -> int:
        return self.count - len(self.entries)

    def record(self, message: str) -> None:
        self.count += 1
        log_event(logger, logging.WARNING, "group_enrichment_failed", job_id=self._job_id, error=message)
        if self.count > self._max_errors:
            return
        self.entries.append(JobErrorEntry(message=message))
        try:
            self._job_log.add_job_error(self._job_id, message)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.ERROR, "job_error_persist_failed", job_id=self._job_id, error=str(exc))
