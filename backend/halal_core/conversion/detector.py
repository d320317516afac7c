"""
Ingredient detection in free-form recipe text.

Every canonical id, alias and display name in the knowledge base becomes a set
of separator variants ('red_wine', 'red wine', 'red-wine') matched whole-word and
case-insensitively. Longer terms claim their spans first, so 'bacon' is never
matched inside 'turkey bacon' and 'wine' never inside 'red wine vinegar'.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple
import logging
import re

from halal_core.evaluation.evaluator import HalalEvaluator, PreferencesLike
from halal_core.knowledge.knowledge_store import KnowledgeStore
from halal_core.knowledge.record_schema import Status
from halal_core.models.preferences import Preferences
from halal_core.models.results import DetectedIssue
from halal_core.normalization.normalizer import search_variants

logger = logging.getLogger(__name__)

FLAGGED_STATUSES = (Status.HARAM, Status.CONDITIONAL)


@dataclass(frozen=True)
class TermMatch:
    ingredient_id: str
    start: int
    end: int
    text: str


def _whole_word(term: str) -> Pattern:
    return re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)", re.IGNORECASE)


class TermScanner:
    """Compiled search table for one store. Immutable after construction."""

    def __init__(self, store: KnowledgeStore):
        owners: Dict[str, str] = {}
        for term, canonical_id in store.search_terms():
            for variant in search_variants(term):
                owners.setdefault(variant, canonical_id)
        ordered = sorted(enumerate(owners.items()), key=lambda e: (-len(e[1][0]), e[0]))
        self._table: List[Tuple[str, str, Pattern]] = [
            (variant, canonical_id, _whole_word(variant)) for _, (variant, canonical_id) in ordered
        ]
        logger.debug("SCANNER terms=%d", len(self._table))

    def scan(self, text: str) -> List[TermMatch]:
        """Non-overlapping matches, longest terms first, returned in text order."""
        if not text:
            return []
        claimed = bytearray(len(text))
        matches: List[TermMatch] = []
        low = text.lower()
        for variant, canonical_id, pattern in self._table:
            if variant not in low:
                continue
            for m in pattern.finditer(text):
                start, end = m.span()
                if 1 in claimed[start:end]:
                    continue
                claimed[start:end] = b"\x01" * (end - start)
                matches.append(TermMatch(canonical_id, start, end, m.group(0)))
        matches.sort(key=lambda m: m.start)
        return matches

    def __len__(self) -> int:
        return len(self._table)


class IngredientDetector:
    """
    detect(text, preferences) -> one DetectedIssue per flagged canonical ingredient,
    in order of first appearance. Only haram and conditional rulings are flagged.
    """

    def __init__(self, evaluator: HalalEvaluator, scanner: Optional[TermScanner] = None):
        self._evaluator = evaluator
        self._store = evaluator.store
        self._scanner = scanner or TermScanner(self._store)

    @property
    def scanner(self) -> TermScanner:
        return self._scanner

    def detect(self, text: str, preferences: PreferencesLike = None) -> List[DetectedIssue]:
        if not text or not isinstance(text, str):
            return []
        prefs = Preferences.coerce(preferences)

        first_match: Dict[str, TermMatch] = {}
        for m in self._scanner.scan(text):
            first_match.setdefault(m.ingredient_id, m)

        issues: List[DetectedIssue] = []
        for canonical_id, match in first_match.items():
            result = self._evaluator.evaluate_item(canonical_id, prefs)
            if result.status not in FLAGGED_STATUSES:
                continue
            record = self._store.lookup(canonical_id)
            issues.append(
                DetectedIssue(
                    ingredient_id=canonical_id,
                    matched_text=match.text,
                    status=result.status,
                    replacement_id=result.alternatives[0] if result.alternatives else None,
                    evaluation=result,
                    conversion_ratio=record.conversion_ratio if record else "1:1",
                )
            )
        logger.info(
            "DETECT known=%d flagged=%d ids=%s strictness=%s madhab=%s",
            len(first_match), len(issues), [i.ingredient_id for i in issues],
            prefs.strictness.value, prefs.madhab,
        )
        return issues
