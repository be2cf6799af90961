"""
Vendor adapter exports.
"""

from app.enrichment.adapters.adapter import AdapterResult, VendorAdapter, build_vendor_adapter
from app.enrichment.adapters.registry import AdapterRegistry

__all__ = ["AdapterRegistry", "AdapterResult", "VendorAdapter", "build_vendor_adapter"]
