"""
Group SKU rows into product groups keyed by (collection, product name).
"""

from __future__ import annotations

from collections.abc import Iterable

from app.enrichment.types import ProductGroup, SkuRecord


def group_skus(rows: Iterable[SkuRecord]) -> list[ProductGroup]:
    """
    Return product groups in first-seen order; SKUs keep input order within a group.
    """

    groups: dict[tuple[str | None, str], ProductGroup] = {}
    for row in rows:
        key = (row.collection, row.product_name)
        group = groups.get(key)
        if group is None:
            group = ProductGroup(
                collection=row.collection,
                product_name=row.product_name,
                product_id=row.product_id,
            )
            groups[key] = group
        group.skus.append(row)
    return list(groups.values())
