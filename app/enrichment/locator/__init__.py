"""
Site locator exports.
"""

from app.enrichment.locator.locator import NotFoundPredicate, SiteLocator
from app.enrichment.locator.strategies import (
    DirectUrlStrategy,
    LinkScanStrategy,
    LookupApiStrategy,
    StrategyContext,
    build_strategy,
    render_url,
    slugify,
)

__all__ = [
    "DirectUrlStrategy",
    "LinkScanStrategy",
    "LookupApiStrategy",
    "NotFoundPredicate",
    "SiteLocator",
    "StrategyContext",
    "build_strategy",
    "render_url",
    "slugify",
]
