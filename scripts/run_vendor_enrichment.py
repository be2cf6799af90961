"""
Run vendor catalog enrichment from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import uuid

from app.services.enrichment_service import EnrichmentService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Run vendor catalog enrichment for one vendor source.")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--source-id",
        dest="source_id",
        type=uuid.UUID,
        default=None,
        help="Vendor source id to enrich.",
    )
    group.add_argument(
        "--list-adapters",
        dest="list_adapters",
        action="store_true",
        help="Print registered vendor adapter keys and exit.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = EnrichmentService()
    if args.list_adapters:
        print(json.dumps(service.registry.keys(), indent=2))
        return 0

    with SessionLocal() as db:
        summary = service.run_source(db=db, source_id=args.source_id)

    payload = {
        "job_id": str(summary.job_id),
        "vendor_source_id": str(summary.vendor_source_id),
        "scraper_key": summary.scraper_key,
        "status": summary.status,
        **summary.stats.as_payload(),
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
