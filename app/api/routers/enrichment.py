"""
app/api/routers/enrichment.py

Vendor enrichment trigger and scrape job listing endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.enrichment.errors import (
    BrowserLaunchError,
    UnknownVendorAdapterError,
    VendorConfigError,
    VendorSourceNotFoundError,
)
from app.schemas.enrichment import EnrichmentRunResponse, ScrapeJobListResponse, ScrapeJobResponse
from app.services.enrichment_service import EnrichmentService, get_enrichment_service
from db.models.scrape_job import ScrapeJob
from db.session import get_db

router = APIRouter(tags=["vendor-enrichment"])


@router.post("/vendor-sources/{source_id}/enrich", response_model=EnrichmentRunResponse)
def enrich_vendor_source(
    source_id: UUID,
    db: Session = Depends(get_db),
    enrichment_service: EnrichmentService = Depends(get_enrichment_service),
) -> EnrichmentRunResponse:
    """
    Run one enrichment job for a vendor source and return its summary.
    """

    try:
        summary = enrichment_service.run_source(db=db, source_id=source_id)
    except VendorSourceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (VendorConfigError, UnknownVendorAdapterError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BrowserLaunchError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    stats = summary.stats
    return EnrichmentRunResponse(
        job_id=summary.job_id,
        vendor_source_id=summary.vendor_source_id,
        scraper_key=summary.scraper_key,
        status=summary.status,
        products_total=stats.products_total,
        skus_enriched=stats.skus_enriched,
        skus_skipped=stats.skus_skipped,
        images_added=stats.images_added,
        error_count=stats.error_count,
        outcomes=dict(stats.outcomes),
    )


@router.get("/scrape-jobs", response_model=ScrapeJobListResponse)
def list_scrape_jobs(
    vendor_source_id: UUID | None = Query(default=None, description="Optional vendor source filter"),
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    enrichment_service: EnrichmentService = Depends(get_enrichment_service),
) -> ScrapeJobListResponse:
    jobs = enrichment_service.list_jobs(
        db=db,
        vendor_source_id=vendor_source_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return ScrapeJobListResponse(jobs=[_to_job_response(job) for job in jobs])


def _to_job_response(job: ScrapeJob) -> ScrapeJobResponse:
    return ScrapeJobResponse(
        job_id=job.id,
        vendor_source_id=job.vendor_source_id,
        status=job.status,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        products_found=job.products_found or 0,
        products_created=job.products_created or 0,
        products_updated=job.products_updated or 0,
        skus_created=job.skus_created or 0,
        errors=list(job.errors or []),
        log=job.log or "",
    )
