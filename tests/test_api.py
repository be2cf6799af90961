"""
tests/test_api.py

Pytest tests for the vendor enrichment HTTP endpoints.

The router is mounted on a bare FastAPI app with the database session and
enrichment service overridden, so no database or browser is needed.
"""

from __future__ import annotations

import uuid
from collections import Counter
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers.enrichment import router
from app.enrichment.errors import (
    BrowserLaunchError,
    UnknownVendorAdapterError,
    VendorConfigError,
    VendorSourceNotFoundError,
)
from app.enrichment.types import EnrichmentRunSummary, RunStats
from app.services.enrichment_service import get_enrichment_service
from db.session import get_db

SOURCE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
JOB_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")


class FakeService:
    def __init__(self) -> None:
        self.error: Exception | None = None
        self.list_calls: list[dict] = []

    def run_source(self, *, db, source_id):
        if self.error is not None:
            raise self.error
        stats = RunStats(
            products_total=3,
            skus_enriched=5,
            skus_skipped=1,
            images_added=7,
            error_count=0,
            outcomes=Counter({"merged": 2, "not_found": 1}),
        )
        return EnrichmentRunSummary(
            job_id=JOB_ID,
            vendor_source_id=source_id,
            scraper_key="kraus",
            status="completed",
            stats=stats,
        )

    def list_jobs(self, **kwargs):
        self.list_calls.append(kwargs)
        return [
            SimpleNamespace(
                id=JOB_ID,
                vendor_source_id=SOURCE_ID,
                status="completed",
                created_at=datetime(2026, 10, 18, 3, 0, tzinfo=timezone.utc),
                started_at=datetime(2026, 10, 18, 3, 0, tzinfo=timezone.utc),
                completed_at=None,
                products_found=3,
                products_created=None,
                products_updated=5,
                skus_created=None,
                errors=[{"message": "Oak: timeout", "timestamp": "2026-10-18T03:01:00+00:00"}],
                log="[03:00:00] Found 6 Kraus SKUs to enrich\n",
            )
        ]


@pytest.fixture()
def service() -> FakeService:
    return FakeService()


@pytest.fixture()
def client(service) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_db] = lambda: None
    app.dependency_overrides[get_enrichment_service] = lambda: service
    return TestClient(app)


class TestEnrichEndpoint:
    def test_returns_run_summary(self, client) -> None:
        response = client.post(f"/vendor-sources/{SOURCE_ID}/enrich")

        assert response.status_code == 200
        body = response.json()
        assert body["job_id"] == str(JOB_ID)
        assert body["skus_enriched"] == 5
        assert body["outcomes"] == {"merged": 2, "not_found": 1}

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (VendorSourceNotFoundError("missing"), 404),
            (VendorConfigError("no brand_prefix"), 400),
            (UnknownVendorAdapterError("unknown key"), 400),
            (BrowserLaunchError("no chromium"), 503),
        ],
    )
    def test_error_mapping(self, client, service, error, status_code) -> None:
        service.error = error

        response = client.post(f"/vendor-sources/{SOURCE_ID}/enrich")

        assert response.status_code == status_code
        assert response.json()["detail"] == str(error)

    def test_invalid_source_id(self, client) -> None:
        assert client.post("/vendor-sources/not-a-uuid/enrich").status_code == 422


class TestScrapeJobsEndpoint:
    def test_lists_jobs_with_filters(self, client, service) -> None:
        response = client.get(
            "/scrape-jobs",
            params={"vendor_source_id": str(SOURCE_ID), "status": "completed", "limit": 10},
        )

        assert response.status_code == 200
        job = response.json()["jobs"][0]
        assert job["products_created"] == 0
        assert job["errors"][0]["message"] == "Oak: timeout"
        assert service.list_calls == [
            {"vendor_source_id": SOURCE_ID, "status": "completed", "limit": 10, "offset": 0}
        ]

    def test_limit_bounds(self, client) -> None:
        assert client.get("/scrape-jobs", params={"limit": 0}).status_code == 422
        assert client.get("/scrape-jobs", params={"limit": 501}).status_code == 422
