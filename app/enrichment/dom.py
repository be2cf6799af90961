"""
BeautifulSoup helpers over rendered page snapshots.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

NON_VISIBLE_TAGS = ("script", "style", "noscript", "template")


def parse_html(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html or "", "html.parser")
    for node in soup.find_all(NON_VISIBLE_TAGS):
        node.decompose()
    return soup


def clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def visible_text(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    return clean_text(root.get_text(" ", strip=True))
