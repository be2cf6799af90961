"""
Shared fakes and fixtures for enrichment tests.

Nothing here touches the network, a browser or a database.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import Any

import pytest

from app.enrichment.config.models import EnrichmentSettings
from app.enrichment.storage.base import CatalogStorage, JobLog, MediaAssetInput
from app.enrichment.types import SkuRecord

NOT_FOUND_HTML = "<html><body><h1>Page not found</h1></body></html>"


class FakePage:
    """
    In-memory stand-in for PageHandle driven by a URL -> (status, html) map.
    """

    def __init__(
        self,
        routes: dict[str, tuple[int, str]] | None = None,
        json_routes: dict[str, Any] | None = None,
    ) -> None:
        self.routes = dict(routes or {})
        self.json_routes = dict(json_routes or {})
        self.url = "about:blank"
        self.html = ""
        self.visited: list[str] = []
        self.json_requests: list[str] = []

    def navigate(self, url: str, *, wait_policy: str = "networkidle", timeout_ms: int | None = None) -> int | None:
        self.visited.append(url)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        status, html = route if route is not None else (404, NOT_FOUND_HTML)
        self.url = url
        self.html = html
        return status

    def fetch_json(self, url: str, *, timeout_ms: int | None = None) -> Any:
        self.json_requests.append(url)
        payload = self.json_routes.get(url)
        if isinstance(payload, Exception):
            raise payload
        if payload is None:
            raise ValueError(f"No response received for {url}")
        return payload

    def content(self) -> str:
        return self.html


class FakeBrowserSession:
    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.closed = False
        self.pages_opened = 0

    def __enter__(self) -> "FakeBrowserSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def new_page(self, *, user_agent: str | None = None) -> FakePage:
        self.pages_opened += 1
        return self.page

    def close(self) -> None:
        self.closed = True


class FakeCatalogStorage(CatalogStorage):
    def __init__(self, rows: list[SkuRecord] | None = None) -> None:
        self.rows = list(rows or [])
        self.queries: list[tuple[uuid.UUID, str]] = []
        self.descriptions: dict[uuid.UUID, str] = {}
        self.media: list[MediaAssetInput] = []
        self.attributes: list[tuple[uuid.UUID, str, str]] = []
        self.fail_media_for: set[uuid.UUID] = set()

    def fetch_vendor_skus(self, *, vendor_id: uuid.UUID, brand_prefix: str) -> list[SkuRecord]:
        self.queries.append((vendor_id, brand_prefix))
        return [row for row in self.rows if (row.collection or "").startswith(brand_prefix)]

    def update_product_description(self, *, product_id: uuid.UUID, description: str) -> bool:
        if self.descriptions.get(product_id):
            return False
        self.descriptions[product_id] = description
        return True

    def upsert_media_asset(self, asset: MediaAssetInput) -> None:
        if asset.product_id in self.fail_media_for:
            raise RuntimeError("media write failed")
        self.media.append(asset)

    def upsert_sku_attribute(self, *, sku_id: uuid.UUID, attribute_slug: str, value: str) -> None:
        self.attributes.append((sku_id, attribute_slug, value))


class FakeJobLog(JobLog):
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.payloads: list[dict[str, Any]] = []
        self.errors: list[str] = []

    def append_log(self, job_id: uuid.UUID, message: str, payload: dict[str, Any] | None = None) -> None:
        self.lines.append(message)
        if payload is not None:
            self.payloads.append(dict(payload))

    def add_job_error(self, job_id: uuid.UUID, message: str) -> None:
        self.errors.append(message)


def make_sku(
    product_name: str,
    *,
    collection: str = "Kraus Timberland",
    product_id: uuid.UUID | None = None,
    variant_name: str | None = None,
    existing_description: str | None = None,
) -> SkuRecord:
    sku_id = uuid.uuid4()
    return SkuRecord(
        sku_id=sku_id,
        vendor_sku=f"V-{sku_id.hex[:6]}",
        internal_sku=f"I-{sku_id.hex[:8]}",
        variant_name=variant_name,
        product_id=product_id or uuid.uuid5(uuid.NAMESPACE_URL, f"{collection}/{product_name}"),
        product_name=product_name,
        collection=collection,
        existing_description=existing_description,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> EnrichmentSettings:
    return EnrichmentSettings(
        vendor_config_path="app/enrichment/config/vendors.json",
        user_agent="test-agent",
        viewport_width=1440,
        viewport_height=900,
        default_delay_ms=0,
        page_timeout_ms=30000,
        api_timeout_ms=15000,
        max_images=8,
        max_job_errors=30,
        progress_every=10,
        headless=True,
    )


@pytest.fixture()
def fake_page() -> Callable[..., FakePage]:
    return FakePage


@pytest.fixture()
def sku_factory() -> Callable[..., SkuRecord]:
    return make_sku


@pytest.fixture()
def catalog() -> FakeCatalogStorage:
    return FakeCatalogStorage()


@pytest.fixture()
def job_log() -> FakeJobLog:
    return FakeJobLog()
