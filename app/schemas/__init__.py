"""
app/schemas package marker.
"""

from app.schemas.enrichment import EnrichmentRunResponse, ScrapeJobListResponse, ScrapeJobResponse

__all__ = [
    "EnrichmentRunResponse",
    "ScrapeJobListResponse",
    "ScrapeJobResponse",
]
