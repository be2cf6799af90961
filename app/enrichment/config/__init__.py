"""
Config helpers for vendor enrichment.
"""

from app.enrichment.config.loader import (
    build_vendor_source_config,
    get_enrichment_settings,
    load_vendor_profiles,
    parse_vendor_profile,
    resolve_config_path,
)
from app.enrichment.config.models import (
    EnrichmentSettings,
    ExtractionProfile,
    KeywordRule,
    NotFoundConfig,
    StrategyConfig,
    VendorProfile,
    VendorSourceConfig,
)

__all__ = [
    "EnrichmentSettings",
    "ExtractionProfile",
    "KeywordRule",
    "NotFoundConfig",
    "StrategyConfig",
    "VendorProfile",
    "VendorSourceConfig",
    "build_vendor_source_config",
    "get_enrichment_settings",
    "load_vendor_profiles",
    "parse_vendor_profile",
    "resolve_config_path",
]
