"""
tests/test_site_locator.py

Pytest unit tests for locator strategies, the strategy chain and vendor adapters.

Coverage
--------
- slugify / render_url
- Fallback ordering: failing or empty strategies fall through, first success stops the chain
- Not-found predicate: marker selectors, keywords, required URL fragment
- Lookup-API strategy: first case-insensitive name match, wrapped result lists, bad payloads
- Deterministic slug with HTTP 200 check, full-text search and listing scan
- Fixed inter-request delay after each navigation, lookup API calls included
- Listing scan follows the innermost matching card, never a wrapping grid
- Adapter outcomes: not_found, empty, merged
"""

from __future__ import annotations

import pytest

from app.enrichment.adapters import build_vendor_adapter
from app.enrichment.config import load_vendor_profiles
from app.enrichment.config.models import NotFoundConfig, StrategyConfig
from app.enrichment.errors import StrategyError
from app.enrichment.locator import (
    LookupApiStrategy,
    NotFoundPredicate,
    SiteLocator,
    StrategyContext,
    render_url,
    slugify,
)
from app.enrichment.throttle import NavigationThrottle
from app.enrichment.types import GroupOutcome

KRAUS_PRODUCT_HTML = """
<html><body>
  <div class="woocommerce-product-gallery"><img src="/wp-content/uploads/oak-ridge.jpg"></div>
  <div class="product-description">Oak Ridge waterproof plank.</div>
</body></html>
"""


@pytest.fixture(scope="module")
def profiles():
    return load_vendor_profiles(config_path="app/enrichment/config/vendors.json")


class ScriptedStrategy:
    """Strategy stub returning a canned result or raising."""

    def __init__(self, kind, result=None, error=None, url=None) -> None:
        self.kind = kind
        self.result = result
        self.error = error
        self.url = url
        self.calls = 0

    def locate(self, page, product_name):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.result == "page":
            page.url = self.url or page.url
            page.html = "<html><body>ok</body></html>"
            return page
        return None


def _context(base_url: str = "https://vendor.test", sleeps: list[float] | None = None) -> StrategyContext:
    sink = sleeps if sleeps is not None else []
    return StrategyContext(
        base_url=base_url,
        throttle=NavigationThrottle(delay_ms=2000, sleep=sink.append),
    )


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


class TestUrlHelpers:
    def test_slugify_collapses_separators(self) -> None:
        assert slugify('Oak Ridge 7.5" Plank') == "oak-ridge-7-5-plank"
        assert slugify("  --Calacatta  Gold--  ") == "calacatta-gold"

    def test_render_url_encodes_query_and_strips_trailing_slash(self) -> None:
        url = render_url(
            "{base_url}/?s={query}&post_type=product",
            base_url="https://www.krausflooring.com/",
            product_name="Oak & Ash",
        )
        assert url == "https://www.krausflooring.com/?s=Oak%20%26%20Ash&post_type=product"

    def test_render_url_slug(self) -> None:
        url = render_url("{base_url}/product/{slug}/", base_url="https://k.test", product_name="Oak Ridge")
        assert url == "https://k.test/product/oak-ridge/"


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------


class TestSiteLocatorChain:
    def test_falls_through_on_error_and_none(self, fake_page) -> None:
        first = ScriptedStrategy("lookup_api", error=TimeoutError("timeout 15000ms exceeded"))
        second = ScriptedStrategy("slug", result=None)
        third = ScriptedStrategy("search", result="page", url="https://vendor.test/p/1")
        locator = SiteLocator(strategies=[first, second, third], not_found=NotFoundPredicate(NotFoundConfig()))

        located = locator.locate(fake_page(), "Oak Ridge")

        assert located is not None
        assert located.url == "https://vendor.test/p/1"
        assert (first.calls, second.calls, third.calls) == (1, 1, 1)

    def test_first_success_stops_the_chain(self, fake_page) -> None:
        first = ScriptedStrategy("slug", result="page")
        second = ScriptedStrategy("search", result="page")
        locator = SiteLocator(strategies=[first, second], not_found=NotFoundPredicate(NotFoundConfig()))

        assert locator.locate(fake_page(), "Oak Ridge") is not None
        assert second.calls == 0

    def test_not_found_page_falls_through(self, fake_page) -> None:
        predicate = NotFoundPredicate(NotFoundConfig(keywords=("ok",)))
        first = ScriptedStrategy("slug", result="page")
        second = ScriptedStrategy("search", result=None)
        locator = SiteLocator(strategies=[first, second], not_found=predicate)

        assert locator.locate(fake_page(), "Oak Ridge") is None
        assert second.calls == 1

    def test_all_strategies_exhausted_returns_none(self, fake_page) -> None:
        locator = SiteLocator(
            strategies=[ScriptedStrategy("slug", error=RuntimeError("boom"))],
            not_found=NotFoundPredicate(NotFoundConfig()),
        )
        assert locator.locate(fake_page(), "Oak Ridge") is None


class TestNotFoundPredicate:
    def test_marker_selector(self, fake_page) -> None:
        page = fake_page(routes={"u": (200, "<body class='error404'><p>Oops</p></body>")})
        page.navigate("u")
        assert NotFoundPredicate(NotFoundConfig(selectors=("body.error404",)))(page)

    def test_keyword_in_visible_text_only(self, fake_page) -> None:
        page = fake_page(routes={"u": (200, "<body><script>var s='no product';</script><p>Tile</p></body>")})
        page.navigate("u")
        assert not NotFoundPredicate(NotFoundConfig(keywords=("no product",)))(page)

    def test_required_url_fragment(self, fake_page) -> None:
        page = fake_page(routes={"https://v.test/home": (200, "<p>home</p>")})
        page.navigate("https://v.test/home")
        assert NotFoundPredicate(NotFoundConfig(url_must_contain="/product"))(page)

    def test_empty_config_accepts_everything(self, fake_page) -> None:
        assert not NotFoundPredicate(NotFoundConfig())(fake_page())


# ---------------------------------------------------------------------------
# Lookup API
# ---------------------------------------------------------------------------


class TestLookupApiStrategy:
    def _strategy(self, sleeps=None) -> LookupApiStrategy:
        return LookupApiStrategy(
            config=StrategyConfig(kind="lookup_api", url_template="{base_url}/autocomplete.php?q={query}"),
            context=_context(sleeps=sleeps),
        )

    def test_takes_first_case_insensitive_match(self, fake_page) -> None:
        sleeps: list[float] = []
        page = fake_page(
            routes={"https://vendor.test/product?id=12": (200, "<p>Calacatta Gold</p>")},
            json_routes={
                "https://vendor.test/autocomplete.php?q=Calacatta%20Gold": [
                    {"name": "Calacatta Silver", "url": "/product?id=9"},
                    {"name": "CALACATTA GOLD Matte", "url": "/product?id=12"},
                    {"name": "Calacatta Gold Polished", "url": "/product?id=13"},
                ]
            },
        )

        located = self._strategy(sleeps).locate(page, "Calacatta Gold")

        assert located is page
        assert page.visited == ["https://vendor.test/product?id=12"]
        assert sleeps == [2.0, 2.0]

    def test_accepts_wrapped_result_list(self, fake_page) -> None:
        page = fake_page(
            json_routes={
                "https://vendor.test/autocomplete.php?q=Onyx": {"results": [{"name": "Onyx", "url": "/p/onyx"}]}
            },
        )
        assert self._strategy().locate(page, "Onyx") is page
        assert page.visited == ["https://vendor.test/p/onyx"]

    def test_no_match_returns_none_without_navigation(self, fake_page) -> None:
        page = fake_page(json_routes={"https://vendor.test/autocomplete.php?q=Onyx": []})
        assert self._strategy().locate(page, "Onyx") is None
        assert page.visited == []

    def test_unexpected_payload_raises_strategy_error(self, fake_page) -> None:
        page = fake_page(json_routes={"https://vendor.test/autocomplete.php?q=Onyx": {"status": "ok"}})
        with pytest.raises(StrategyError):
            self._strategy().locate(page, "Onyx")


# ---------------------------------------------------------------------------
# Vendor adapters built from shipped profiles
# ---------------------------------------------------------------------------


class TestKrausAdapter:
    SLUG_URL = "https://www.krausflooring.com/product/oak-ridge/"
    SEARCH_URL = "https://www.krausflooring.com/?s=Oak%20Ridge&post_type=product"
    PRODUCT_URL = "https://www.krausflooring.com/product/oak-ridge-plank/"

    def test_slug_hit_skips_search(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["kraus"], settings=settings, delay_ms=0)
        page = fake_page(routes={self.SLUG_URL: (200, KRAUS_PRODUCT_HTML)})

        result = adapter.find_product(page, "Oak Ridge")

        assert result.outcome == GroupOutcome.MERGED
        assert page.visited == [self.SLUG_URL]
        assert result.data.description == "Oak Ridge waterproof plank."

    def test_slug_404_falls_back_to_search(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["kraus"], settings=settings, delay_ms=0)
        search_html = """
        <body>
          <a class="woocommerce-loop-product__link" href="/product/maple-grove/"><h2>Maple Grove</h2></a>
          <a class="woocommerce-loop-product__link" href="/product/oak-ridge-plank/"><h2>Oak Ridge Plank</h2></a>
        </body>
        """
        page = fake_page(
            routes={
                self.SEARCH_URL: (200, search_html),
                self.PRODUCT_URL: (200, KRAUS_PRODUCT_HTML),
            }
        )

        result = adapter.find_product(page, "Oak Ridge")

        assert result.outcome == GroupOutcome.MERGED
        assert page.visited == [self.SLUG_URL, self.SEARCH_URL, self.PRODUCT_URL]
        assert result.data.images == ["https://www.krausflooring.com/wp-content/uploads/oak-ridge.jpg"]

    def test_no_results_page_is_not_found(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["kraus"], settings=settings, delay_ms=0)
        page = fake_page(
            routes={self.SEARCH_URL: (200, "<body><p class='woocommerce-info'>No products were found.</p></body>")}
        )

        result = adapter.find_product(page, "Oak Ridge")

        assert result.outcome == GroupOutcome.NOT_FOUND
        assert result.data is None

    def test_delay_applied_after_each_navigation(self, profiles, settings, fake_page) -> None:
        sleeps: list[float] = []
        adapter = build_vendor_adapter(profiles["kraus"], settings=settings, delay_ms=1500, sleep=sleeps.append)
        page = fake_page(routes={self.SLUG_URL: (200, KRAUS_PRODUCT_HTML)})

        adapter.find_product(page, "Oak Ridge")

        assert sleeps == [1.5]


class TestElysiumAdapter:
    LOOKUP_URL = "https://elysiumtiles.com/autocomplete.php?q=Calacatta%20Gold"
    QUERY_URL = "https://elysiumtiles.com/product?id=Calacatta%20Gold"

    def test_lookup_failure_falls_back_to_query_url(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["elysium"], settings=settings, delay_ms=0)
        page = fake_page(
            routes={
                self.QUERY_URL: (
                    200,
                    "<body><div class='product-description'>Calacatta Gold porcelain, PEI 4</div></body>",
                )
            },
            json_routes={self.LOOKUP_URL: ValueError("Unexpected token < in JSON")},
        )

        result = adapter.find_product(page, "Calacatta Gold")

        assert result.outcome == GroupOutcome.MERGED
        assert page.json_requests == [self.LOOKUP_URL]
        assert result.data.specs["pei_rating"] == "4"
        assert result.data.specs["material"] == "Porcelain"

    def test_page_found_without_data_is_empty(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["elysium"], settings=settings, delay_ms=0)
        page = fake_page(
            routes={self.QUERY_URL: (200, "<body><h1>Calacatta Gold</h1></body>")},
            json_routes={self.LOOKUP_URL: []},
        )

        result = adapter.find_product(page, "Calacatta Gold")

        assert result.outcome == GroupOutcome.EMPTY

    def test_delay_applied_after_lookup_call_and_navigation(self, profiles, settings, fake_page) -> None:
        sleeps: list[float] = []
        adapter = build_vendor_adapter(profiles["elysium"], settings=settings, delay_ms=1000, sleep=sleeps.append)
        page = fake_page(
            routes={"https://elysiumtiles.com/product?id=77": (200, "<body><p class='description'>Glossy</p></body>")},
            json_routes={self.LOOKUP_URL: [{"name": "Calacatta Gold", "url": "/product?id=77"}]},
        )

        adapter.find_product(page, "Calacatta Gold")

        assert page.json_requests == [self.LOOKUP_URL]
        assert page.visited == ["https://elysiumtiles.com/product?id=77"]
        assert sleeps == [1.0, 1.0]

    def test_failed_lookup_call_still_waits(self, profiles, settings, fake_page) -> None:
        sleeps: list[float] = []
        adapter = build_vendor_adapter(profiles["elysium"], settings=settings, delay_ms=1000, sleep=sleeps.append)
        page = fake_page(
            routes={self.QUERY_URL: (200, "<body><h1>Calacatta Gold</h1></body>")},
            json_routes={self.LOOKUP_URL: TimeoutError("Timeout 15000ms exceeded")},
        )

        adapter.find_product(page, "Calacatta Gold")

        assert sleeps == [1.0, 1.0]


class TestBosphorusAdapter:
    LISTING_URL = "https://bosphorusimports.com/products"

    def test_listing_scan_follows_first_matching_card(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["bosphorus"], settings=settings, delay_ms=0)
        listing = """
        <body>
          <div class="product-card"><a href="/products/bianco-carrara">Bianco Carrara</a></div>
          <div class="product-card"><a href="/products/nero-marquina">Nero Marquina 12x24</a></div>
        </body>
        """
        detail = """
        <body>
          <img src="/cdn/uploads/capsule/nero-1.jpg?v=2">
          <p>Polished marble</p>
        </body>
        """
        page = fake_page(
            routes={
                "https://bosphorusimports.com/products": (200, listing),
                "https://bosphorusimports.com/products/nero-marquina": (200, detail),
            }
        )

        result = adapter.find_product(page, "Nero Marquina")

        assert result.outcome == GroupOutcome.MERGED
        assert result.data.images == ["https://bosphorusimports.com/cdn/uploads/capsule/nero-1.jpg"]
        assert result.data.specs == {"material": "Marble", "finish": "Polished"}

    def test_wrapping_grid_does_not_hijack_the_match(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["bosphorus"], settings=settings, delay_ms=0)
        listing = """
        <body>
          <div class="products-grid">
            <div class="product-card"><a href="/products/bianco-carrara">Bianco Carrara</a></div>
            <div class="product-card"><a href="/products/nero-marquina">Nero Marquina</a></div>
          </div>
        </body>
        """
        page = fake_page(
            routes={
                self.LISTING_URL: (200, listing),
                "https://bosphorusimports.com/products/bianco-carrara": (200, "<body><p>Bianco</p></body>"),
                "https://bosphorusimports.com/products/nero-marquina": (200, "<body><p>Nero polished</p></body>"),
            }
        )

        result = adapter.find_product(page, "Nero Marquina")

        assert page.visited == [self.LISTING_URL, "https://bosphorusimports.com/products/nero-marquina"]
        assert result.data.specs == {"finish": "Polished"}

    def test_card_link_without_name_text_is_followed(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["bosphorus"], settings=settings, delay_ms=0)
        listing = """
        <body>
          <div class="product-item"><h3>Nero Marquina</h3><a href="/products/nm-01">View</a></div>
        </body>
        """
        page = fake_page(routes={self.LISTING_URL: (200, listing)})

        adapter.find_product(page, "Nero Marquina")

        assert page.visited == [self.LISTING_URL, "https://bosphorusimports.com/products/nm-01"]

    def test_card_with_several_unrelated_links_is_skipped(self, profiles, settings, fake_page) -> None:
        adapter = build_vendor_adapter(profiles["bosphorus"], settings=settings, delay_ms=0)
        listing = """
        <body>
          <div class="product-item">
            <h3>Nero Marquina</h3>
            <a href="/products/bianco-carrara">Compare</a>
            <a href="/products/crema-marfil">Related</a>
          </div>
        </body>
        """
        page = fake_page(routes={self.LISTING_URL: (200, listing)})

        result = adapter.find_product(page, "Nero Marquina")

        assert result.outcome == GroupOutcome.NOT_FOUND
        assert page.visited == [self.LISTING_URL]
