"""
Image URL helpers: product-shot ranking and asset typing.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

PRODUCT_SHOT_KEYWORDS = (
    "swatch",
    "chip",
    "product",
    "closeup",
    "close-up",
    "sample",
    "solo",
    "isolated",
    "cutout",
    "cut-out",
    "studio",
    "white-bg",
    "transparent",
    "no-bg",
    "nobg",
    "variation",
    "resize",
)
LIFESTYLE_KEYWORDS = (
    "room",
    "scene",
    "lifestyle",
    "installed",
    "roomscene",
    "setting",
    "interior",
    "kitchen",
    "bath",
    "bathroom",
    "living",
    "outdoor",
    "pool",
    "backyard",
    "application",
    "install",
    "showroom",
    "ambiance",
    "vignette",
    "hero",
    "banner",
    "header",
    "amb0",
    "amb1",
    "_amb_",
    "-amb-",
    "crop_upscale",
)
LIFESTYLE_ASSET_TOKENS = ("room", "scene")


def prefer_product_shot(
    urls: Sequence[str],
    color_hint: str | None = None,
) -> list[str]:
    """
    Stable re-rank that moves clean product shots ahead of lifestyle images.

    Vendor gallery order is kept unless a filename carries a strong signal.
    """

    if len(urls) <= 1:
        return list(urls)

    color_slug = _slug(color_hint) if color_hint else None

    def score(url: str) -> float:
        filename = url.lower().rsplit("/", 1)[-1].split("?", 1)[0]
        value = 0.0
        if filename.endswith(".png"):
            value += 2
        if re.search(r"-p\.\w+$", filename):
            value += 6
        if any(keyword in filename for keyword in PRODUCT_SHOT_KEYWORDS):
            value += 3
        if any(keyword in filename for keyword in LIFESTYLE_KEYWORDS):
            value -= 5
        if color_slug and len(color_slug) >= 3 and color_slug in filename:
            value += 5
        return value

    # sorted() is stable, so equal scores keep the vendor's order.
    return sorted(urls, key=score, reverse=True)


def classify_asset_type(index: int, url: str) -> str:
    if index == 0:
        return "primary"
    lowered = url.lower()
    if any(token in lowered for token in LIFESTYLE_ASSET_TOKENS):
        return "lifestyle"
    return "alternate"


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", value.lower())
