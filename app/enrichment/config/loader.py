"""
Environment + JSON config loader for vendor enrichment.
"""

from __future__ import annotations

import json
import os
import re
import uuid
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from db.config import load_env_files

from app.enrichment.config.models import (
    DEFAULT_ATTRIBUTE_KEYS,
    DEFAULT_IMAGE_EXCLUDE_TOKENS,
    DEFAULT_KEYWORD_RULES,
    STRATEGY_KINDS,
    EnrichmentSettings,
    ExtractionProfile,
    KeywordRule,
    NotFoundConfig,
    StrategyConfig,
    VendorProfile,
    VendorSourceConfig,
)
from app.enrichment.errors import VendorConfigError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


@lru_cache(maxsize=1)
def get_enrichment_settings() -> EnrichmentSettings:
    """
    Return cached enrichment settings from environment variables.
    """

    load_env_files()
    config_path = _get_str_env(
        "ENRICH_VENDOR_CONFIG_PATH",
        "app/enrichment/config/vendors.json",
    )
    return EnrichmentSettings(
        vendor_config_path=str(resolve_config_path(config_path)),
        user_agent=_get_str_env("ENRICH_USER_AGENT", DEFAULT_USER_AGENT),
        viewport_width=max(320, _get_int_env("ENRICH_VIEWPORT_WIDTH", 1440)),
        viewport_height=max(240, _get_int_env("ENRICH_VIEWPORT_HEIGHT", 900)),
        default_delay_ms=max(0, _get_int_env("ENRICH_DEFAULT_DELAY_MS", 2000)),
        page_timeout_ms=max(1000, _get_int_env("ENRICH_PAGE_TIMEOUT_MS", 30000)),
        api_timeout_ms=max(1000, _get_int_env("ENRICH_API_TIMEOUT_MS", 15000)),
        max_images=max(1, _get_int_env("ENRICH_MAX_IMAGES", 8)),
        max_job_errors=max(1, _get_int_env("ENRICH_MAX_JOB_ERRORS", 30)),
        progress_every=max(1, _get_int_env("ENRICH_PROGRESS_EVERY", 10)),
        headless=_get_bool_env("ENRICH_HEADLESS", True),
    )


def load_vendor_profiles(*, config_path: str) -> dict[str, VendorProfile]:
    """
    Load vendor profiles from a JSON file, keyed by profile key.
    """

    path = resolve_config_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Vendor config file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    vendors = raw_data.get("vendors", [])
    if not isinstance(vendors, list):
        raise VendorConfigError("Invalid vendor config: 'vendors' must be a list.")

    profiles: dict[str, VendorProfile] = {}
    for entry in vendors:
        profile = parse_vendor_profile(entry)
        if profile is not None:
            profiles[profile.key] = profile
    return profiles


def parse_vendor_profile(entry: object) -> VendorProfile | None:
    """
    Build one VendorProfile from a JSON entry; None for unusable entries.
    """

    if not isinstance(entry, dict):
        return None

    key = str(entry.get("key", "")).strip().lower()
    base_url = str(entry.get("base_url", "")).strip()
    if not key or not base_url:
        return None

    strategies = tuple(
        _parse_strategy(vendor_key=key, raw=item)
        for item in entry.get("strategies", [])
        if isinstance(item, dict)
    )
    if not strategies:
        raise VendorConfigError(f"Vendor '{key}' declares no locator strategies.")

    return VendorProfile(
        key=key,
        brand=str(entry.get("brand", key)).strip() or key,
        base_url=base_url.rstrip("/"),
        strategies=strategies,
        extraction=_parse_extraction(entry.get("extraction", {})),
        not_found=_parse_not_found(entry.get("not_found", {})),
        user_agent=_optional_str(entry.get("user_agent")),
    )


def build_vendor_source_config(
    *,
    vendor_id: uuid.UUID,
    scraper_key: str | None,
    config: Mapping[str, Any] | None,
    profile: VendorProfile | None = None,
    name: str | None = None,
    source_id: uuid.UUID | None = None,
    base_url: str | None = None,
    default_delay_ms: int = 2000,
) -> VendorSourceConfig:
    """
    Normalize a vendor source row's JSON config into a VendorSourceConfig.
    """

    key = (scraper_key or "").strip()
    if ":" not in key:
        key = key.lower()
    if not key:
        raise VendorConfigError(f"Vendor source '{name or source_id}' has no scraper_key.")

    raw_config = dict(config or {})
    brand_prefix = _optional_str(raw_config.get("brand_prefix"))
    if brand_prefix is None and profile is not None:
        brand_prefix = profile.brand
    if not brand_prefix:
        raise VendorConfigError(f"Vendor source '{name or key}' has no brand_prefix.")

    delay_ms = _optional_int(raw_config.get("delay_ms"))
    return VendorSourceConfig(
        vendor_id=vendor_id,
        scraper_key=key,
        brand_prefix=brand_prefix,
        delay_ms=max(0, delay_ms) if delay_ms is not None else default_delay_ms,
        name=name,
        source_id=source_id,
        base_url=base_url,
    )


def _parse_strategy(*, vendor_key: str, raw: dict[str, Any]) -> StrategyConfig:
    kind = str(raw.get("kind", "")).strip().lower()
    if kind not in STRATEGY_KINDS:
        allowed = ", ".join(sorted(STRATEGY_KINDS))
        raise VendorConfigError(
            f"Unknown strategy kind='{kind}' for vendor='{vendor_key}'. Allowed kinds: {allowed}."
        )
    url_template = _optional_str(raw.get("url_template"))
    if url_template is None:
        raise VendorConfigError(f"Strategy '{kind}' for vendor='{vendor_key}' has no url_template.")
    return StrategyConfig(
        kind=kind,
        url_template=url_template,
        link_selector=_optional_str(raw.get("link_selector")),
        require_ok_status=_optional_bool(raw.get("require_ok_status"), False),
        timeout_ms=_optional_int(raw.get("timeout_ms")),
        name_field=_optional_str(raw.get("name_field")) or "name",
        url_field=_optional_str(raw.get("url_field")) or "url",
    )


def _parse_extraction(raw: object) -> ExtractionProfile:
    if not isinstance(raw, dict):
        return ExtractionProfile()

    keyword_rules: list[KeywordRule] = []
    for item in raw.get("keyword_rules", []):
        if not isinstance(item, dict):
            continue
        attribute = _optional_str(item.get("attribute"))
        keywords = _normalize_str_list(item.get("keywords"), lower=True)
        if attribute and keywords:
            keyword_rules.append(KeywordRule(attribute=attribute, keywords=keywords))

    regex_fields: dict[str, str] = {}
    raw_regex = raw.get("regex_fields", {})
    if isinstance(raw_regex, dict):
        for attribute, pattern in raw_regex.items():
            if not isinstance(attribute, str) or not isinstance(pattern, str):
                continue
            try:
                re.compile(pattern)
            except re.error as exc:
                raise VendorConfigError(f"Invalid regex for '{attribute}': {exc}") from exc
            regex_fields[attribute.strip()] = pattern

    aliases: dict[str, str] = {}
    raw_aliases = raw.get("attribute_aliases", {})
    if isinstance(raw_aliases, dict):
        for label, attribute in raw_aliases.items():
            if isinstance(label, str) and isinstance(attribute, str) and label.strip():
                aliases[label.strip().lower()] = attribute.strip()

    return ExtractionProfile(
        image_selectors=_normalize_str_list(raw.get("image_selectors")),
        image_exclude_tokens=(
            _normalize_str_list(raw.get("image_exclude_tokens"), lower=True)
            or DEFAULT_IMAGE_EXCLUDE_TOKENS
        ),
        strip_image_query=_optional_bool(raw.get("strip_image_query"), False),
        description_selectors=_normalize_str_list(raw.get("description_selectors")),
        spec_row_selectors=_normalize_str_list(raw.get("spec_row_selectors")),
        attribute_keys=_normalize_str_list(raw.get("attribute_keys")) or DEFAULT_ATTRIBUTE_KEYS,
        attribute_aliases=aliases,
        keyword_rules=tuple(keyword_rules) or DEFAULT_KEYWORD_RULES,
        extract_size=_optional_bool(raw.get("extract_size"), True),
        regex_fields=regex_fields,
    )


def _parse_not_found(raw: object) -> NotFoundConfig:
    if not isinstance(raw, dict):
        return NotFoundConfig()
    return NotFoundConfig(
        selectors=_normalize_str_list(raw.get("selectors")),
        keywords=_normalize_str_list(raw.get("keywords"), lower=True),
        url_must_contain=_optional_str(raw.get("url_must_contain")),
    )


def _normalize_str_list(value: object, *, lower: bool = False) -> tuple[str, ...]:
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, list):
        items = [item for item in value if isinstance(item, str)]
    else:
        return ()
    cleaned = [item.strip() for item in items if item.strip()]
    if lower:
        cleaned = [item.lower() for item in cleaned]
    return tuple(cleaned)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
