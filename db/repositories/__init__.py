"""
Repository layer exports.
"""

from db.repositories.catalog_repository import CatalogRepository
from db.repositories.scrape_job_repository import ScrapeJobRepository, format_log_line
from db.repositories.vendor_source_repository import VendorSourceRepository

__all__ = [
    "CatalogRepository",
    "ScrapeJobRepository",
    "VendorSourceRepository",
    "format_log_line",
]
