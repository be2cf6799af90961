"""
Storage collaborators for catalog enrichment.
"""

from app.enrichment.storage.base import CatalogStorage, JobLog, MediaAssetInput
from app.enrichment.storage.sqlalchemy_storage import SQLAlchemyCatalogStorage, SQLAlchemyJobLog

__all__ = [
    "CatalogStorage",
    "JobLog",
    "MediaAssetInput",
    "SQLAlchemyCatalogStorage",
    "SQLAlchemyJobLog",
]
