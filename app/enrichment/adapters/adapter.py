"""
Vendor adapter: one vendor profile bound to a locator chain and an extraction engine.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from app.enrichment.browser import PageHandle
from app.enrichment.config.models import EnrichmentSettings, VendorProfile
from app.enrichment.extraction import ExtractionEngine
from app.enrichment.locator import NotFoundPredicate, SiteLocator, StrategyContext, build_strategy
from app.enrichment.throttle import NavigationThrottle
from app.enrichment.types import ExtractedProductData, GroupOutcome


@dataclass(frozen=True)
class AdapterResult:
    outcome: str
    data: ExtractedProductData | None = None


@dataclass
class VendorAdapter:
    key: str
    profile: VendorProfile
    locator: SiteLocator
    engine: ExtractionEngine

    @property
    def not_found(self) -> NotFoundPredicate:
        return self.locator.not_found

    def locate(self, page: PageHandle, product_name: str) -> PageHandle | None:
        return self.locator.locate(page, product_name)

    def extract(self, page: PageHandle) -> ExtractedProductData:
        return self.engine.extract(page)

    def find_product(self, page: PageHandle, product_name: str) -> AdapterResult:
        located = self.locate(page, product_name)
        if located is None:
            return AdapterResult(outcome=GroupOutcome.NOT_FOUND)
        data = self.extract(located)
        if not data.has_data():
            return AdapterResult(outcome=GroupOutcome.EMPTY)
        return AdapterResult(outcome=GroupOutcome.MERGED, data=data)


def build_vendor_adapter(
    profile: VendorProfile,
    *,
    settings: EnrichmentSettings,
    delay_ms: int,
    sleep: Callable[[float], None] = time.sleep,
) -> VendorAdapter:
    context = StrategyContext(
        base_url=profile.base_url,
        throttle=NavigationThrottle(delay_ms=delay_ms, sleep=sleep),
        page_timeout_ms=settings.page_timeout_ms,
        api_timeout_ms=settings.api_timeout_ms,
    )
    locator = SiteLocator(
        strategies=[build_strategy(config=item, context=context) for item in profile.strategies],
        not_found=NotFoundPredicate(profile.not_found),
        vendor=profile.key,
    )
    return VendorAdapter(
        key=profile.key,
        profile=profile,
        locator=locator,
        engine=ExtractionEngine(profile.extraction),
    )
