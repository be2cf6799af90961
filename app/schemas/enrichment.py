"""
app/schemas/enrichment.py

Request/response schemas for vendor enrichment endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class EnrichmentRunResponse(BaseModel):
    """
    API response model for one completed enrichment run.
    """

    job_id: UUID
    vendor_source_id: UUID
    scraper_key: str
    status: str
    products_total: int = Field(..., ge=0)
    skus_enriched: int = Field(..., ge=0)
    skus_skipped: int = Field(..., ge=0)
    images_added: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    outcomes: dict[str, int] = Field(default_factory=dict)


class ScrapeJobResponse(BaseModel):
    job_id: UUID
    vendor_source_id: UUID
    status: str
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    products_found: int = 0
    products_created: int = 0
    products_updated: int = 0
    skus_created: int = 0
    errors: list[dict[str, Any]] = Field(default_factory=list)
    log: str = ""


class ScrapeJobListResponse(BaseModel):
    jobs: list[ScrapeJobResponse] = Field(default_factory=list)
