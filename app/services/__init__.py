"""
app/services package marker.
"""

from app.services.enrichment_service import EnrichmentService, get_enrichment_service

__all__ = [
    "EnrichmentService",
    "get_enrichment_service",
]
