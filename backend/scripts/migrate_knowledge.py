#!/usr/bin/env python3
"""
Merge knowledge files of any schema version into one v2 file.
Later files override earlier ones on id collision, as at load time.
Usage: cd backend && python scripts/migrate_knowledge.py ../data/knowledge/legacy_knowledge.json \
           ../data/knowledge/halal_knowledge.json -o ../data/knowledge/merged.json
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from halal_core.knowledge.migration import migrate_document
from halal_core.knowledge.record_schema import SCHEMA_VERSION

logger = logging.getLogger(__name__)


def merge_documents(paths: Sequence[Path], knowledge_version: Optional[str] = None) -> dict:
    merged: dict = {}
    versions: List[str] = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            doc = json.load(f)
        migrated = migrate_document(doc, source_name=Path(path).name)
        for item in migrated["ingredients"]:
            if item["id"] in merged:
                logger.info("KNOWLEDGE_MERGE override id=%s from=%s", item["id"], Path(path).name)
            merged[item["id"]] = item
        versions.append(migrated["knowledge_version"])
    return {
        "schema_version": SCHEMA_VERSION,
        "knowledge_version": knowledge_version or "+".join(versions) or "0",
        "ingredients": sorted(merged.values(), key=lambda r: r["id"]),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Migrate and merge knowledge files into a single v2 document")
    parser.add_argument("inputs", nargs="+", type=Path, help="Knowledge files in merge order")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Where to write the v2 document")
    parser.add_argument("--knowledge-version", default=None, help="Version label for the merged document")
    args = parser.parse_args(argv)

    missing = [p for p in args.inputs if not p.exists()]
    if missing:
        logger.error("Knowledge file(s) not found: %s", ", ".join(str(p) for p in missing))
        return 1
    try:
        doc = merge_documents(args.inputs, args.knowledge_version)
    except ValueError as e:
        logger.error("Migration failed: %s", e)
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2, ensure_ascii=False)
    logger.info("Wrote %s with %d ingredients (version %s)", args.output, len(doc["ingredients"]), doc["knowledge_version"])
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
