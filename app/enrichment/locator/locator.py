"""
Ordered strategy chain that finds a vendor product page for a product name.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.enrichment.browser import PageHandle
from app.enrichment.config.models import NotFoundConfig
from app.enrichment.dom import parse_html, visible_text
from app.enrichment.locator.strategies import LocatorStrategy
from app.enrichment.logging_utils import log_event

logger = logging.getLogger(__name__)


class NotFoundPredicate:
    """
    Detects vendor "not found" pages by URL, marker element or page text.
    """

    def __init__(self, config: NotFoundConfig) -> None:
        self.config = config

    def __call__(self, page: PageHandle) -> bool:
        if self.config.url_must_contain and self.config.url_must_contain not in (page.url or ""):
            return True
        if not self.config.selectors and not self.config.keywords:
            return False

        soup = parse_html(page.content())
        for selector in self.config.selectors:
            if soup.select_one(selector) is not None:
                return True
        text = visible_text(soup).lower()
        return any(keyword in text for keyword in self.config.keywords)


class SiteLocator:
    """
    Try each strategy in priority order; the first page that is not a
    not-found page wins. Strategy failures fall through to the next strategy.
    """

    def __init__(
        self,
        *,
        strategies: Sequence[LocatorStrategy],
        not_found: NotFoundPredicate,
        vendor: str = "",
    ) -> None:
        self.strategies = list(strategies)
        self.not_found = not_found
        self.vendor = vendor

    def locate(self, page: PageHandle, product_name: str) -> PageHandle | None:
        for position, strategy in enumerate(self.strategies):
            try:
                located = strategy.locate(page, product_name)
                if located is None:
                    continue
                if self.not_found(located):
                    log_event(
                        logger,
                        logging.DEBUG,
                        "strategy_not_found_page",
                        vendor=self.vendor,
                        strategy=strategy.kind,
                        product=product_name,
                    )
                    continue
            except Exception as exc:  # noqa: BLE001
                log_event(
                    logger,
                    logging.DEBUG,
                    "strategy_failed",
                    vendor=self.vendor,
                    strategy=strategy.kind,
                    position=position,
                    product=product_name,
                    error=str(exc),
                )
                continue

            log_event(
                logger,
                logging.DEBUG,
                "product_located",
                vendor=self.vendor,
                strategy=strategy.kind,
                product=product_name,
                url=located.url,
            )
            return located
        return None
