"""
Enrichment configuration models.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

STRATEGY_KINDS = frozenset({"lookup_api", "slug", "query_url", "search", "listing"})

DEFAULT_ATTRIBUTE_KEYS: tuple[str, ...] = (
    "wear_layer",
    "pei_rating",
    "edge_profile",
    "installation_method",
    "core_type",
    "construction",
    "species",
    "thickness",
    "material",
    "finish",
    "width",
    "length",
    "size",
    "color",
)

DEFAULT_IMAGE_EXCLUDE_TOKENS: tuple[str, ...] = ("logo", "icon")

DEFAULT_KEYWORD_DICTIONARIES: dict[str, tuple[str, ...]] = {
    "material": (
        "porcelain",
        "ceramic",
        "glass",
        "stone",
        "vinyl",
        "laminate",
        "hardwood",
        "carpet",
    ),
    "finish": ("polished", "matte", "honed", "glossy", "textured", "smooth", "embossed"),
}


@dataclass(frozen=True)
class StrategyConfig:
    """
    One step of a vendor's page-location strategy chain.

    `url_template` accepts `{base_url}`, `{query}` (URL-encoded name) and
    `{slug}` placeholders.
    """

    kind: str
    url_template: str
    link_selector: str | None = None
    require_ok_status: bool = False
    timeout_ms: int | None = None
    name_field: str = "name"
    url_field: str = "url"


@dataclass(frozen=True)
class NotFoundConfig:
    """
    Signals that a navigated page is a vendor "not found" page.
    """

    selectors: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    url_must_contain: str | None = None


@dataclass(frozen=True)
class KeywordRule:
    """
    Ordered keyword dictionary for one attribute; first match wins.
    """

    attribute: str
    keywords: tuple[str, ...]


DEFAULT_KEYWORD_RULES: tuple[KeywordRule, ...] = tuple(
    KeywordRule(attribute=attribute, keywords=keywords)
    for attribute, keywords in DEFAULT_KEYWORD_DICTIONARIES.items()
)


@dataclass(frozen=True)
class ExtractionProfile:
    """
    Declarative selectors and dictionaries driving the extraction engine.
    """

    image_selectors: tuple[str, ...] = ()
    image_exclude_tokens: tuple[str, ...] = DEFAULT_IMAGE_EXCLUDE_TOKENS
    strip_image_query: bool = False
    description_selectors: tuple[str, ...] = ()
    spec_row_selectors: tuple[str, ...] = ()
    attribute_keys: tuple[str, ...] = DEFAULT_ATTRIBUTE_KEYS
    attribute_aliases: dict[str, str] = field(default_factory=dict)
    keyword_rules: tuple[KeywordRule, ...] = DEFAULT_KEYWORD_RULES
    extract_size: bool = True
    regex_fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VendorProfile:
    """
    Everything that varies per vendor site.
    """

    key: str
    brand: str
    base_url: str
    strategies: tuple[StrategyConfig, ...]
    extraction: ExtractionProfile
    not_found: NotFoundConfig = field(default_factory=NotFoundConfig)
    user_agent: str | None = None


@dataclass(frozen=True)
class VendorSourceConfig:
    """
    One configured vendor source as handed to the orchestrator.
    """

    vendor_id: uuid.UUID
    scraper_key: str
    brand_prefix: str
    delay_ms: int = 2000
    name: str | None = None
    source_id: uuid.UUID | None = None
    base_url: str | None = None


@dataclass(frozen=True)
class EnrichmentSettings:
    """
    Runtime settings for vendor enrichment.
    """

    vendor_config_path: str
    user_agent: str
    viewport_width: int
    viewport_height: int
    default_delay_ms: int
    page_timeout_ms: int
    api_timeout_ms: int
    max_images: int
    max_job_errors: int
    progress_every: int
    headless: bool
