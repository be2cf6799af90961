"""
Extraction engine exports.
"""

from app.enrichment.extraction.engine import ExtractionEngine

__all__ = ["ExtractionEngine"]
