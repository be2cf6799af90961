"""
Exception hierarchy for the vendor enrichment pipeline.
"""

from __future__ import annotations


class EnrichmentError(Exception):
    """Base exception for enrichment pipeline failures."""


class VendorConfigError(EnrichmentError, ValueError):
    """Raised when a vendor profile or vendor source config is invalid."""


class UnknownVendorAdapterError(EnrichmentError):
    """Raised when a scraper_key does not resolve to a registered adapter."""


class BrowserLaunchError(EnrichmentError):
    """Raised when the headless browser session cannot be started."""


class StrategyError(EnrichmentError):
    """Raised by a locator strategy that could not reach a product page."""


class VendorSourceNotFoundError(EnrichmentError, LookupError):
    """Raised when a vendor source id does not exist."""
