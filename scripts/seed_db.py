"""
Seed script for the Road Hazard Watch reports collection.

Usage:
  - Dry run (default): python -m scripts.seed_db
  - Apply to configured Firestore: python -m scripts.seed_db --apply
  - Use another seed file: python -m scripts.seed_db --file path/to/reports.json

Behavior:
  - Loads a JSON object of {doc_id: report} (default: scripts/sample_reports.json).
  - Validates every report against app.models.report.Report.
  - Writes each report to the configured REPORTS_COLLECTION.
"""

import argparse
import json
import logging
import os
from typing import Any, Dict

from pydantic import ValidationError

from app.config.firebase import get_db
from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.models.report import Report

logger = logging.getLogger("seed_db")

DEFAULT_SEED_PATH = os.path.join(os.path.dirname(__file__), "sample_reports.json")


def load_seed(path: str = DEFAULT_SEED_PATH) -> Dict[str, Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_seed(seed: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Drop entries that would not be readable by the API."""
    valid = {}
    for doc_id, data in seed.items():
        try:
            Report.model_validate(dict(data, id=doc_id))
        except ValidationError as e:
            logger.warning(f"Skipping {doc_id}: {e.error_count()} validation error(s)")
            continue
        valid[doc_id] = data
    return valid


def write_to_db(db: Any, seed: Dict[str, Dict[str, Any]], apply: bool = False) -> int:
    written = 0
    collection = db.collection(settings.REPORTS_COLLECTION) if apply else None
    for doc_id, data in seed.items():
        logger.info(f"Preparing: {settings.REPORTS_COLLECTION}/{doc_id}")
        if not apply:
            continue
        try:
            collection.document(doc_id).set(data)
            written += 1
            logger.info(f"Wrote: {settings.REPORTS_COLLECTION}/{doc_id}")
        except Exception as e:
            logger.error(f"Failed to write {settings.REPORTS_COLLECTION}/{doc_id}: {e}")
    return written


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--file", default=DEFAULT_SEED_PATH, help="Seed file with {doc_id: report}")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)

    if not os.path.exists(args.file):
        logger.error(f"Seed file not found: {args.file}")
        return

    seed = validate_seed(load_seed(args.file))
    db = get_db() if args.apply else None
    written = write_to_db(db, seed, apply=args.apply)

    if args.apply:
        logger.info(f"Seeding completed: {written}/{len(seed)} reports written.")
    else:
        logger.info("Dry run complete. Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()
