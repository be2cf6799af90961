"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.attribute import Attribute, SkuAttribute
from db.models.media_asset import MediaAsset, MediaAssetType
from db.models.product import Product, Sku
from db.models.scrape_job import ScrapeJob, ScrapeJobStatus
from db.models.vendor import Vendor
from db.models.vendor_source import VendorSource

__all__ = [
    "Vendor",
    "Product",
    "Sku",
    "Attribute",
    "SkuAttribute",
    "MediaAsset",
    "MediaAssetType",
    "VendorSource",
    "ScrapeJob",
    "ScrapeJobStatus",
]
