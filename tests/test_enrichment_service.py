"""
tests/test_enrichment_service.py

Pytest unit tests for EnrichmentService job tracking.

Repositories and SQLAlchemy storage are swapped for in-memory fakes; the
session is a MagicMock so commit / rollback calls can be asserted.

Coverage
--------
- Unknown source, missing scraper_key, unknown adapter: raised before any job row
- Successful run: job completed, last_scraped touched, summary returned
- Run failure after job creation: rollback, job marked failed, error re-raised
- list_jobs passes filters through to the repository
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

import app.services.enrichment_service as service_module
from app.enrichment.adapters import AdapterRegistry
from app.enrichment.adapters.adapter import AdapterResult
from app.enrichment.errors import (
    BrowserLaunchError,
    UnknownVendorAdapterError,
    VendorConfigError,
    VendorSourceNotFoundError,
)
from app.enrichment.types import ExtractedProductData, GroupOutcome
from app.services.enrichment_service import EnrichmentService

from conftest import FakeBrowserSession, FakeCatalogStorage, FakeJobLog, FakePage, make_sku

SOURCE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
VENDOR_ID = uuid.UUID("00000000-0000-0000-0000-0000000000bb")
JOB_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeDbLayer:
    """Shared state behind the fake repositories for one test."""

    def __init__(self) -> None:
        self.sources: dict[uuid.UUID, SimpleNamespace] = {}
        self.jobs: dict[uuid.UUID, SimpleNamespace] = {}
        self.touched: list[uuid.UUID] = []
        self.list_calls: list[dict] = []
        self.catalog = FakeCatalogStorage()
        self.job_log = FakeJobLog()


class FakeVendorSourceRepository:
    def __init__(self, layer: FakeDbLayer) -> None:
        self._layer = layer

    def get_source(self, source_id):
        return self._layer.sources.get(source_id)

    def touch_last_scraped(self, source_id):
        self._layer.touched.append(source_id)
        return self._layer.sources.get(source_id)


class FakeScrapeJobRepository:
    def __init__(self, layer: FakeDbLayer) -> None:
        self._layer = layer

    def create_running_job(self, *, vendor_source_id):
        job = SimpleNamespace(id=JOB_ID, vendor_source_id=vendor_source_id, status="running", errors=[])
        self._layer.jobs[job.id] = job
        return job

    def mark_completed(self, *, job_id):
        self._layer.jobs[job_id].status = "completed"

    def mark_failed(self, *, job_id, error_message):
        job = self._layer.jobs[job_id]
        job.status = "failed"
        job.errors.append({"message": error_message})

    def list_jobs(self, **kwargs):
        self._layer.list_calls.append(kwargs)
        return list(self._layer.jobs.values())


class StubAdapter:
    def __init__(self, result: AdapterResult) -> None:
        self.key = "stub"
        self.profile = SimpleNamespace(user_agent=None)
        self.result = result

    def find_product(self, page, product_name):
        return self.result


@pytest.fixture()
def layer(monkeypatch) -> FakeDbLayer:
    state = FakeDbLayer()
    monkeypatch.setattr(service_module, "VendorSourceRepository", lambda db: FakeVendorSourceRepository(state))
    monkeypatch.setattr(service_module, "ScrapeJobRepository", lambda db: FakeScrapeJobRepository(state))
    monkeypatch.setattr(service_module, "SQLAlchemyCatalogStorage", lambda db: state.catalog)
    monkeypatch.setattr(service_module, "SQLAlchemyJobLog", lambda db: state.job_log)
    return state


def _add_source(layer: FakeDbLayer, *, scraper_key: str | None = "stub", config: dict | None = None) -> None:
    layer.sources[SOURCE_ID] = SimpleNamespace(
        id=SOURCE_ID,
        vendor_id=VENDOR_ID,
        scraper_key=scraper_key,
        config={"brand_prefix": "Kraus"} if config is None else config,
        name="Kraus website",
        base_url=None,
    )


def _service(settings, result: AdapterResult | None = None, launcher=None) -> EnrichmentService:
    adapter = StubAdapter(
        result
        or AdapterResult(
            outcome=GroupOutcome.MERGED,
            data=ExtractedProductData(description="Rigid core plank."),
        )
    )
    registry = AdapterRegistry(factories={"stub": lambda **kwargs: adapter})
    return EnrichmentService(
        settings=settings,
        registry=registry,
        browser_launcher=launcher or (lambda s: FakeBrowserSession(FakePage())),
        sleep=lambda seconds: None,
    )


# ---------------------------------------------------------------------------
# Setup failures
# ---------------------------------------------------------------------------


class TestRunSourceSetupErrors:
    def test_unknown_source(self, settings, layer) -> None:
        db = MagicMock()
        with pytest.raises(VendorSourceNotFoundError):
            _service(settings).run_source(db=db, source_id=SOURCE_ID)
        assert layer.jobs == {}

    def test_missing_scraper_key(self, settings, layer) -> None:
        _add_source(layer, scraper_key=None)
        with pytest.raises(VendorConfigError):
            _service(settings).run_source(db=MagicMock(), source_id=SOURCE_ID)
        assert layer.jobs == {}

    def test_unknown_adapter(self, settings, layer) -> None:
        _add_source(layer, scraper_key="nobody")
        with pytest.raises(UnknownVendorAdapterError):
            _service(settings).run_source(db=MagicMock(), source_id=SOURCE_ID)
        assert layer.jobs == {}


# ---------------------------------------------------------------------------
# Job lifecycle
# ---------------------------------------------------------------------------


class TestRunSourceLifecycle:
    def test_successful_run_completes_job(self, settings, layer) -> None:
        _add_source(layer)
        layer.catalog.rows = [make_sku("Oak", variant_name="7mm"), make_sku("Oak", variant_name="9mm")]
        db = MagicMock()

        summary = _service(settings).run_source(db=db, source_id=SOURCE_ID)

        assert summary.job_id == JOB_ID
        assert summary.vendor_source_id == SOURCE_ID
        assert summary.scraper_key == "stub"
        assert summary.status == "completed"
        assert summary.stats.products_total == 1
        assert summary.stats.skus_enriched == 2
        assert layer.jobs[JOB_ID].status == "completed"
        assert layer.touched == [SOURCE_ID]
        assert db.commit.call_count >= 2
        db.rollback.assert_not_called()
        assert layer.job_log.lines[0] == "Found 2 Kraus SKUs to enrich"

    def test_run_failure_marks_job_failed(self, settings, layer) -> None:
        _add_source(layer)
        layer.catalog.rows = [make_sku("Oak")]
        db = MagicMock()

        def broken_launcher(s):
            raise BrowserLaunchError("Unable to launch Chromium: missing binary")

        with pytest.raises(BrowserLaunchError):
            _service(settings, launcher=broken_launcher).run_source(db=db, source_id=SOURCE_ID)

        job = layer.jobs[JOB_ID]
        assert job.status == "failed"
        assert "missing binary" in job.errors[0]["message"]
        db.rollback.assert_called_once()
        assert layer.touched == []

    def test_list_jobs_passes_filters(self, settings, layer) -> None:
        _service(settings).list_jobs(db=MagicMock(), vendor_source_id=SOURCE_ID, status="failed", limit=5, offset=10)
        assert layer.list_calls == [
            {"vendor_source_id": SOURCE_ID, "status": "failed", "limit": 5, "offset": 10}
        ]
