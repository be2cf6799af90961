"""
Vendor adapter registry and factory.
"""

from __future__ import annotations

import importlib
import time
from collections.abc import Callable, Mapping
from dataclasses import replace

from app.enrichment.adapters.adapter import VendorAdapter, build_vendor_adapter
from app.enrichment.config.models import EnrichmentSettings, VendorProfile, VendorSourceConfig
from app.enrichment.errors import UnknownVendorAdapterError

AdapterFactory = Callable[..., VendorAdapter]


class AdapterRegistry:
    """
    Registry resolving a scraper_key to a vendor adapter.

    Keys resolve to a custom factory first, then to a declarative vendor
    profile. Keys of the form 'module.path:factory' are imported dynamically.
    """

    def __init__(
        self,
        profiles: Mapping[str, VendorProfile] | None = None,
        factories: Mapping[str, AdapterFactory] | None = None,
    ) -> None:
        self._profiles: dict[str, VendorProfile] = dict(profiles or {})
        self._factories: dict[str, AdapterFactory] = {
            key.strip().lower(): factory for key, factory in (factories or {}).items()
        }

    def register_profile(self, profile: VendorProfile) -> None:
        self._profiles[profile.key] = profile

    def register_factory(self, *, scraper_key: str, factory: AdapterFactory) -> None:
        self._factories[scraper_key.strip().lower()] = factory

    def keys(self) -> list[str]:
        return sorted({*self._profiles.keys(), *self._factories.keys()})

    def get_profile(self, scraper_key: str) -> VendorProfile | None:
        return self._profiles.get(scraper_key.strip().lower())

    def create_adapter(
        self,
        *,
        source: VendorSourceConfig,
        settings: EnrichmentSettings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> VendorAdapter:
        key = source.scraper_key.strip()
        if ":" in key:
            factory = self._load_dynamic_factory(key)
            return factory(source=source, settings=settings, sleep=sleep)

        normalized = key.lower()
        factory = self._factories.get(normalized)
        if factory is not None:
            return factory(source=source, settings=settings, sleep=sleep)

        profile = self._profiles.get(normalized)
        if profile is None:
            allowed = ", ".join(self.keys()) or "none"
            raise UnknownVendorAdapterError(
                f"Unknown scraper_key='{key}' for vendor source='{source.name or source.source_id}'. "
                f"Registered adapters: {allowed}."
            )
        if source.base_url:
            profile = replace(profile, base_url=source.base_url.rstrip("/"))
        return build_vendor_adapter(
            profile,
            settings=settings,
            delay_ms=source.delay_ms,
            sleep=sleep,
        )

    @staticmethod
    def _load_dynamic_factory(path: str) -> AdapterFactory:
        module_path, attribute = path.split(":", 1)
        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            raise UnknownVendorAdapterError(f"Unable to import adapter module '{module_path}'.") from exc
        loaded = getattr(module, attribute, None)
        if loaded is None or not callable(loaded):
            raise UnknownVendorAdapterError(f"Unable to resolve adapter factory '{path}'.")
        return loaded
