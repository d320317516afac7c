"""
Inheritance resolution over the derivation graph ("X is made from / contains Y").

Depth-first walk with an explicit stack and a per-call visited set, so
pathological or cyclic graphs neither recurse nor loop. Parents are entered in
listed order; a parent's final ruling is checked after its own subtree is done,
so the deepest prohibited ancestor is the one reported as inherited_from.
"""
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple
import logging

from halal_core.evaluation.policy import apply_policy
from halal_core.knowledge.knowledge_store import KnowledgeStore
from halal_core.knowledge.record_schema import IngredientRecord, Status
from halal_core.models.preferences import Preferences
from halal_core.normalization.normalizer import normalize_ingredient_id

logger = logging.getLogger(__name__)

_ENTER = "enter"
_EXIT = "exit"


@dataclass(frozen=True)
class ResolvedNode:
    record: IngredientRecord
    display_name: str
    trace: tuple[str, ...]
    alternatives: tuple[str, ...]
    references: tuple[str, ...]
    tags: tuple[str, ...]
    notes: str
    eli5: str
    confidence_impact: int
    inherited_from: Optional[str]
    visited: tuple[str, ...]


def _append_unique(target: List[str], values) -> None:
    for v in values:
        if v and v not in target:
            target.append(v)


class InheritanceResolver:
    def __init__(self, store: KnowledgeStore):
        self._store = store

    def _canonical(self, key: str) -> str:
        return self._store.resolve_id(key) or normalize_ingredient_id(key)

    def resolve(self, ingredient_id: str, preferences: Optional[Preferences] = None) -> Optional[ResolvedNode]:
        """Walk the chain rooted at ingredient_id. None when the root is not in the store."""
        prefs = preferences or Preferences()
        root = self._store.lookup(ingredient_id)
        if root is None:
            return None

        trace: List[str] = []
        visited: Set[str] = set()
        visit_order: List[str] = []
        alternatives: List[str] = []
        references: List[str] = []
        tags: List[str] = []
        display_name = ""
        notes = ""
        eli5 = ""
        impact = 0
        inherited_from: Optional[str] = None

        stack: List[Tuple[str, str, Tuple[str, ...]]] = [(_ENTER, root.id, ())]
        while stack:
            phase, node_id, path = stack.pop()

            if phase == _EXIT:
                if node_id != root.id and inherited_from is None:
                    rec = self._store.lookup(node_id)
                    if rec is not None and apply_policy(rec, prefs.strictness, prefs.madhab).status == Status.HARAM:
                        inherited_from = node_id
                continue

            node_id = self._canonical(node_id)
            if node_id in visited or node_id in path:
                logger.debug("RESOLVE skip revisit id=%s root=%s path=%s", node_id, root.id, path)
                continue
            visited.add(node_id)

            rec = self._store.lookup(node_id)
            if rec is None:
                trace.append(f"Unknown item: {node_id}")
                logger.info("UNKNOWN_INGREDIENT in chain id=%s root=%s", node_id, root.id)
                continue

            visit_order.append(rec.id)
            trace.append(f"{rec.id} is {rec.status.value}")
            if not display_name:
                display_name = rec.display_name
            _append_unique(alternatives, rec.alternatives)
            _append_unique(references, rec.references)
            _append_unique(tags, [rec.category])
            if rec.notes:
                notes = rec.notes
            if rec.eli5:
                eli5 = rec.eli5
            if abs(rec.confidence_impact) > abs(impact):
                impact = rec.confidence_impact

            stack.append((_EXIT, rec.id, path))
            child_path = path + (rec.id,)
            for parent in reversed(rec.derived_from):
                stack.append((_ENTER, parent, child_path))

        return ResolvedNode(
            record=root,
            display_name=display_name or root.display_name,
            trace=tuple(trace),
            alternatives=tuple(alternatives),
            references=tuple(references),
            tags=tuple(tags),
            notes=notes,
            eli5=eli5,
            confidence_impact=impact,
            inherited_from=inherited_from,
            visited=tuple(visit_order),
        )
