"""
Read-only knowledge base index. Built once from one or more record sets;
later sets override earlier ones by id, aliases keep their first registration.
Lookup by exact normalized key only; no substring guessing.
"""
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
import json
import logging

from .migration import migrate_document
from .record_schema import IngredientRecord
from halal_core.config import get_knowledge_paths
from halal_core.normalization.normalizer import normalize_ingredient_id

logger = logging.getLogger(__name__)


class KnowledgeStore:
    """
    O(1) lookup by canonical id or alias.
    Construct with explicit record sets (tests, fixtures) or via from_files().
    """

    def __init__(
        self,
        record_sets: Sequence[Iterable[IngredientRecord]] = (),
        version: str = "0",
    ):
        self._by_id: dict[str, IngredientRecord] = {}
        self._alias_index: dict[str, str] = {}
        self._version = version
        for records in record_sets:
            for rec in records:
                if rec.id in self._by_id:
                    logger.debug("KNOWLEDGE_MERGE override id=%s", rec.id)
                self._by_id[rec.id] = rec
        self._build_alias_index()
        logger.info(
            "KNOWLEDGE_LOAD records=%d aliases=%d version=%s",
            len(self._by_id), len(self._alias_index), self._version,
        )

    def _build_alias_index(self) -> None:
        for rec in self._by_id.values():
            for alias in rec.aliases:
                key = normalize_ingredient_id(alias)
                if not key or key == rec.id:
                    continue
                owner = self._alias_index.get(key)
                if owner is not None and owner != rec.id:
                    logger.debug("KNOWLEDGE_ALIAS collision alias=%s kept=%s dropped=%s", key, owner, rec.id)
                    continue
                self._alias_index[key] = rec.id

    @classmethod
    def from_files(cls, paths: Optional[Sequence[Path]] = None) -> "KnowledgeStore":
        """Load knowledge files in order (any schema version; legacy files are migrated on load)."""
        record_sets: List[List[IngredientRecord]] = []
        versions: List[str] = []
        for path in paths if paths is not None else get_knowledge_paths():
            path = Path(path)
            if not path.exists():
                logger.warning("Knowledge file not found at %s; skipped.", path)
                continue
            with open(path, encoding="utf-8") as f:
                doc = json.load(f)
            migrated = migrate_document(doc, source_name=path.name)
            records: List[IngredientRecord] = []
            for item in migrated["ingredients"]:
                try:
                    records.append(IngredientRecord.from_dict(item))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Malformed knowledge record in %s skipped id=%s: %s", path.name, item.get("id"), e)
            logger.info("Loaded %d knowledge records from %s", len(records), path)
            record_sets.append(records)
            versions.append(migrated["knowledge_version"])
        return cls(record_sets, version="+".join(versions) or "0")

    def resolve_id(self, key: str) -> Optional[str]:
        """Canonical id for an id or alias (any casing / separator form), or None."""
        norm = normalize_ingredient_id(key)
        if not norm:
            return None
        if norm in self._by_id:
            return norm
        return self._alias_index.get(norm)

    def lookup(self, key: str) -> Optional[IngredientRecord]:
        canonical = self.resolve_id(key)
        return self._by_id.get(canonical) if canonical else None

    def search_terms(self) -> Iterator[Tuple[str, str]]:
        """(term, canonical_id) for every id, alias and display name; used for free-text scanning."""
        for rec in self._by_id.values():
            yield rec.id, rec.id
            for alias in rec.aliases:
                if self.resolve_id(alias) == rec.id:
                    yield alias.lower(), rec.id
            if rec.display_name and self.resolve_id(rec.display_name) in (None, rec.id):
                yield rec.display_name.lower(), rec.id

    def display_form(self, key: str) -> str:
        """Text used when this ingredient is written into a recipe."""
        rec = self.lookup(key)
        if rec is None:
            return ""
        return rec.display_name.lower()

    def ids(self) -> List[str]:
        return list(self._by_id.keys())

    def get_version(self) -> str:
        return self._version

    def __contains__(self, key: str) -> bool:
        return self.resolve_id(key) is not None

    def __len__(self) -> int:
        return len(self._by_id)
