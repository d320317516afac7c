"""
Rewrites recipe text: every occurrence of a flagged ingredient that has a known
replacement is swapped for the replacement's display form, keeping the casing
of the original occurrence ('Bacon' -> 'Turkey bacon', 'WINE' -> 'GRAPE JUICE').
"""
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence
import logging

from halal_core.conversion.detector import TermMatch, TermScanner
from halal_core.knowledge.knowledge_store import KnowledgeStore
from halal_core.models.results import DetectedIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubstitutionOutcome:
    converted_text: str
    issues: tuple[DetectedIssue, ...]
    unresolved: tuple[str, ...]

    @property
    def replaced(self) -> tuple[str, ...]:
        return tuple(i.ingredient_id for i in self.issues if i.was_replaced)


def match_case(template: str, replacement: str) -> str:
    """Apply the casing pattern of template (upper, title, capitalized, lower) to replacement."""
    letters = [c for c in template if c.isalpha()]
    if not letters or not replacement:
        return replacement
    if all(c.isupper() for c in letters):
        return replacement.upper()
    if template.istitle() and len(template.split()) > 1:
        return replacement.title()
    if letters[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


class Substituter:
    def __init__(self, store: KnowledgeStore, scanner: TermScanner):
        self._store = store
        self._scanner = scanner

    def _replacement_forms(self, issues: Sequence[DetectedIssue]) -> Dict[str, str]:
        forms: Dict[str, str] = {}
        for issue in issues:
            if not issue.replacement_id:
                continue
            form = self._store.display_form(issue.replacement_id)
            if not form:
                logger.warning(
                    "SUBSTITUTE replacement not in knowledge base id=%s replacement=%s",
                    issue.ingredient_id, issue.replacement_id,
                )
                continue
            forms[issue.ingredient_id] = form
        return forms

    def substitute(self, text: str, issues: Sequence[DetectedIssue]) -> SubstitutionOutcome:
        """Replace every occurrence of each replaceable issue. Issues without a usable replacement stay unresolved."""
        forms = self._replacement_forms(issues)
        pieces: List[str] = []
        cursor = 0
        replaced_ids = set()
        matches: List[TermMatch] = self._scanner.scan(text) if forms else []
        for m in matches:
            form = forms.get(m.ingredient_id)
            if form is None:
                continue
            pieces.append(text[cursor:m.start])
            pieces.append(match_case(m.text, form))
            cursor = m.end
            replaced_ids.add(m.ingredient_id)
        pieces.append(text[cursor:])
        converted = "".join(pieces)

        updated: List[DetectedIssue] = []
        for issue in issues:
            if issue.ingredient_id in replaced_ids:
                updated.append(replace(issue, was_replaced=True, replacement_text=forms[issue.ingredient_id]))
            else:
                updated.append(issue)
        unresolved = tuple(i.ingredient_id for i in updated if not i.was_replaced)
        logger.info("SUBSTITUTE replaced=%s unresolved=%s", sorted(replaced_ids), list(unresolved))
        return SubstitutionOutcome(converted_text=converted, issues=tuple(updated), unresolved=unresolved)
