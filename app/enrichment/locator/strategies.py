"""
Page-location strategies. Each one either leaves the page on a candidate
product page and returns it, returns None, or raises.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote, urljoin

from bs4 import Tag

from app.enrichment.browser import PageHandle
from app.enrichment.config.models import StrategyConfig
from app.enrichment.dom import clean_text, parse_html
from app.enrichment.errors import StrategyError, VendorConfigError
from app.enrichment.throttle import NavigationThrottle

RESULT_LIST_KEYS = ("results", "items", "products", "data")


def slugify(name: str) -> str:
    """
    "Oak Ridge 7.5\\" Plank" -> "oak-ridge-7-5-plank"
    """

    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def render_url(template: str, *, base_url: str, product_name: str) -> str:
    return template.format(
        base_url=base_url.rstrip("/"),
        query=quote(product_name.strip(), safe=""),
        slug=slugify(product_name),
    )


@dataclass(frozen=True)
class StrategyContext:
    base_url: str
    throttle: NavigationThrottle
    page_timeout_ms: int = 30000
    api_timeout_ms: int = 15000

    def navigate(self, page: PageHandle, url: str, *, timeout_ms: int | None = None) -> int | None:
        try:
            return page.navigate(url, timeout_ms=timeout_ms or self.page_timeout_ms)
        finally:
            self.throttle.pause()


class LocatorStrategy(Protocol):
    kind: str

    def locate(self, page: PageHandle, product_name: str) -> PageHandle | None:
        ...


class LookupApiStrategy:
    """
    Query a vendor autocomplete/search endpoint and follow the first result
    whose name contains the product name.
    """

    kind = "lookup_api"

    def __init__(self, *, config: StrategyConfig, context: StrategyContext) -> None:
        self.config = config
        self.context = context

    def locate(self, page: PageHandle, product_name: str) -> PageHandle | None:
        url = render_url(
            self.config.url_template,
            base_url=self.context.base_url,
            product_name=product_name,
        )
        try:
            payload = page.fetch_json(
                url,
                timeout_ms=self.config.timeout_ms or self.context.api_timeout_ms,
            )
        finally:
            self.context.throttle.pause()
        needle = product_name.strip().lower()
        for candidate in _candidate_list(payload):
            name = candidate.get(self.config.name_field)
            target = candidate.get(self.config.url_field)
            if not isinstance(name, str) or not isinstance(target, str) or not target.strip():
                continue
            if needle in name.lower():
                self.context.navigate(page, urljoin(f"{self.context.base_url}/", target.strip()))
                return page
        return None


class DirectUrlStrategy:
    """
    Navigate straight to a URL built from the product name (slug or query).
    """

    def __init__(self, *, config: StrategyConfig, context: StrategyContext) -> None:
        self.config = config
        self.context = context
        self.kind = config.kind

    def locate(self, page: PageHandle, product_name: str) -> PageHandle | None:
        url = render_url(
            self.config.url_template,
            base_url=self.context.base_url,
            product_name=product_name,
        )
        status = self.context.navigate(page, url, timeout_ms=self.config.timeout_ms)
        if self.config.require_ok_status and status != 200:
            return None
        return page


class LinkScanStrategy:
    """
    Open a search-results or listing page and follow the first link whose
    visible text contains the product name.
    """

    def __init__(self, *, config: StrategyConfig, context: StrategyContext) -> None:
        self.config = config
        self.context = context
        self.kind = config.kind

    def locate(self, page: PageHandle, product_name: str) -> PageHandle | None:
        url = render_url(
            self.config.url_template,
            base_url=self.context.base_url,
            product_name=product_name,
        )
        self.context.navigate(page, url, timeout_ms=self.config.timeout_ms)

        soup = parse_html(page.content())
        needle = product_name.strip().lower()
        matches = [
            node
            for node in soup.select(self.config.link_selector or "a[href]")
            if needle in _node_text(node)
        ]
        for node in matches:
            # wrapping containers match too; only the innermost card is followed
            if any(node is parent for other in matches for parent in other.parents):
                continue
            href = _link_target(node, needle)
            if href is None:
                continue
            self.context.navigate(page, urljoin(page.url or url, href))
            return page
        return None


StrategyFactory = Callable[..., LocatorStrategy]

STRATEGY_FACTORIES: Mapping[str, StrategyFactory] = {
    "lookup_api": LookupApiStrategy,
    "slug": DirectUrlStrategy,
    "query_url": DirectUrlStrategy,
    "search": LinkScanStrategy,
    "listing": LinkScanStrategy,
}


def build_strategy(*, config: StrategyConfig, context: StrategyContext) -> LocatorStrategy:
    factory = STRATEGY_FACTORIES.get(config.kind)
    if factory is None:
        raise VendorConfigError(f"No locator strategy registered for kind='{config.kind}'.")
    return factory(config=config, context=context)


def _candidate_list(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        for key in RESULT_LIST_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            raise StrategyError("Lookup response has no result list.")
    if not isinstance(payload, list):
        raise StrategyError(f"Unexpected lookup response type: {type(payload).__name__}")
    return [item for item in payload if isinstance(item, dict)]


def _node_text(node: Tag) -> str:
    return clean_text(node.get_text(" ", strip=True)).lower()


def _link_target(node: Tag, needle: str) -> str | None:
    """
    Link to follow inside a matching card: the anchor whose own text names the
    product, else the card's only link. Ambiguous cards yield None.
    """

    anchors = [node] if node.name == "a" else node.find_all("a", href=True)
    hrefs: list[str] = []
    for anchor in anchors:
        href = anchor.get("href")
        if not isinstance(href, str) or not href.strip() or href.strip().startswith("#"):
            continue
        if needle in _node_text(anchor):
            return href.strip()
        if href.strip() not in hrefs:
            hrefs.append(href.strip())
    return hrefs[0] if len(hrefs) == 1 else None
