"""
Heuristic extraction of images, description and specs from a rendered product page.

Extraction is a pure read of the page snapshot already loaded by the locator.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.enrichment.browser import PageHandle
from app.enrichment.config.models import ExtractionProfile
from app.enrichment.dom import clean_text, parse_html, visible_text
from app.enrichment.types import ExtractedProductData

SIZE_REGEX = re.compile(r"(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)", flags=re.IGNORECASE)
IMAGE_ATTRIBUTES = ("src", "data-src", "data-large_image")
LINK_ATTRIBUTES = ("href", "data-src", "src")


class ExtractionEngine:
    """
    Profile-driven extractor. One instance per vendor profile.
    """

    def __init__(self, profile: ExtractionProfile) -> None:
        self.profile = profile
        self._regex_fields = {
            attribute: re.compile(pattern, flags=re.IGNORECASE)
            for attribute, pattern in profile.regex_fields.items()
        }

    def extract(self, page: PageHandle) -> ExtractedProductData:
        return self.extract_html(page.content(), page_url=page.url)

    def extract_html(self, html: str, *, page_url: str) -> ExtractedProductData:
        soup = parse_html(html)
        return ExtractedProductData(
            images=self.extract_images(soup, page_url=page_url),
            description=self.extract_description(soup),
            specs=self.extract_specs(soup),
        )

    def extract_images(self, soup: BeautifulSoup, *, page_url: str) -> list[str]:
        images: list[str] = []
        seen: set[str] = set()
        for selector in self.profile.image_selectors:
            for node in soup.select(selector):
                url = self._image_url(node, page_url=page_url)
                if url is None or url in seen:
                    continue
                lowered = url.lower()
                if any(token in lowered for token in self.profile.image_exclude_tokens):
                    continue
                seen.add(url)
                images.append(url)
        return images

    def extract_description(self, soup: BeautifulSoup) -> str | None:
        for selector in self.profile.description_selectors:
            for node in soup.select(selector):
                text = clean_text(node.get_text(" ", strip=True))
                if text:
                    return text
        return None

    def extract_specs(self, soup: BeautifulSoup) -> dict[str, str] | None:
        """
        Attribute table first; page-text keyword scan only when the table yields nothing.
        """

        specs = self.extract_table_specs(soup)
        if not specs:
            specs = self.extract_text_specs(visible_text(soup).lower())
        return specs or None

    def extract_table_specs(self, soup: BeautifulSoup) -> dict[str, str]:
        specs: dict[str, str] = {}
        for selector in self.profile.spec_row_selectors:
            for row in soup.select(selector):
                pair = self._row_pair(row)
                if pair is None:
                    continue
                label, value = pair
                attribute = self.match_attribute(label)
                if attribute is not None and attribute not in specs:
                    specs[attribute] = value
        return specs

    def extract_text_specs(self, text: str) -> dict[str, str]:
        specs: dict[str, str] = {}
        for rule in self.profile.keyword_rules:
            if rule.attribute in specs:
                continue
            for keyword in rule.keywords:
                if keyword in text:
                    specs[rule.attribute] = _capitalize(keyword)
                    break

        if self.profile.extract_size and "size" not in specs:
            size_match = SIZE_REGEX.search(text)
            if size_match:
                specs["size"] = f"{size_match.group(1)}x{size_match.group(2)}"

        for attribute, pattern in self._regex_fields.items():
            if attribute in specs:
                continue
            match = pattern.search(text)
            if match:
                specs[attribute] = match.group(1) if pattern.groups else match.group(0)
        return specs

    def match_attribute(self, label: str) -> str | None:
        normalized = re.sub(r"[^a-z0-9]+", " ", label.lower()).strip()
        if not normalized:
            return None
        for key in self.profile.attribute_keys:
            if key.replace("_", " ") in normalized:
                return key
        for token, attribute in self.profile.attribute_aliases.items():
            if token in normalized:
                return attribute
        return None

    def _image_url(self, node: Tag, *, page_url: str) -> str | None:
        attributes = IMAGE_ATTRIBUTES if node.name == "img" else LINK_ATTRIBUTES
        for attribute in attributes:
            raw = node.get(attribute)
            if not isinstance(raw, str) or not raw.strip():
                continue
            raw = raw.strip()
            if raw.startswith("data:"):
                continue
            url = urljoin(page_url, raw)
            if self.profile.strip_image_query:
                url = url.split("?", 1)[0]
            return url
        return None

    @staticmethod
    def _row_pair(row: Tag) -> tuple[str, str] | None:
        label_cell = row.find(["th", "dt"])
        value_cell = row.find(["td", "dd"])
        if label_cell is None:
            cells = row.find_all("td")
            if len(cells) < 2:
                return None
            label_cell, value_cell = cells[0], cells[1]
        if value_cell is None:
            return None
        label = clean_text(label_cell.get_text(" ", strip=True))
        value = clean_text(value_cell.get_text(" ", strip=True))
        if not label or not value:
            return None
        return label, value


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]
