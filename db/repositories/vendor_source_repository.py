"""
Repository for configured vendor sources.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.vendor_source import VendorSource


class VendorSourceRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_source(self, source_id: uuid.UUID) -> VendorSource | None:
        return self._session.get(VendorSource, source_id)

    def list_sources(self, *, active_only: bool = False) -> list[VendorSource]:
        stmt: Select[tuple[VendorSource]] = select(VendorSource)
        if active_only:
            stmt = stmt.where(VendorSource.is_active.is_(True))
        stmt = stmt.order_by(VendorSource.name)
        return list(self._session.scalars(stmt).all())

    def list_scheduled_sources(self) -> list[VendorSource]:
        """
        Active sources that carry a cron schedule and an adapter key.
        """

        stmt = (
            select(VendorSource)
            .where(
                VendorSource.is_active.is_(True),
                VendorSource.schedule.is_not(None),
                VendorSource.scraper_key.is_not(None),
            )
            .order_by(VendorSource.name)
        )
        return list(self._session.scalars(stmt).all())

    def touch_last_scraped(self, source_id: uuid.UUID) -> VendorSource | None:
        source = self.get_source(source_id)
        if source is None:
            return None
        source.last_scraped_at = datetime.now(timezone.utc)
        return source
