#!/usr/bin/env python3
"""
List logged unknown ingredients, most frequent first, so curators can add knowledge records.
With --classify, asks the configured remote classifier for a suggested ruling.
Usage: cd backend && python scripts/review_unknown.py [--min-frequency 2] [--classify]
"""
import argparse
import logging
import sys
from pathlib import Path

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Review unknown ingredients logged by the API")
    parser.add_argument("--min-frequency", type=int, default=1, help="Min times seen to list")
    parser.add_argument("--classify", action="store_true", help="Query the remote classifier for each key")
    args = parser.parse_args()

    from halal_core.enrichment.unknown_log import get_unknown_log
    from halal_core.external_apis import RemoteClassifier

    log = get_unknown_log()
    keys = log.get_keys_for_review(min_frequency=args.min_frequency)
    entries = log.get_entries()
    if not keys:
        logger.info("No unknown ingredients logged at %s", log.path)
        return 0

    classifier = RemoteClassifier() if args.classify else None
    if classifier is not None and not classifier.enabled:
        logger.warning("REMOTE_CLASSIFIER_URL not set; skipping classification")
        classifier = None

    for key in keys:
        ent = entries[key]
        suggestion = ent.get("remote_status") or "-"
        if classifier is not None:
            override = classifier.classify(key)
            suggestion = override.status.value if override else "-"
        print(f"{ent.get('frequency', 0):>5}  {key:<40} suggested={suggestion}  raw={ent.get('raw_inputs', [])[:3]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
