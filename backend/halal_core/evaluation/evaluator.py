"""
Single-ingredient evaluation: resolve chain -> policy overlay -> confidence score.
Shared by ingredient lookups and recipe conversion.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Union
import logging

from halal_core.evaluation.confidence import confidence_level, score_confidence
from halal_core.evaluation.policy import apply_policy
from halal_core.evaluation.resolution import InheritanceResolver
from halal_core.knowledge.knowledge_store import KnowledgeStore
from halal_core.knowledge.record_schema import Status
from halal_core.models.preferences import Preferences
from halal_core.models.results import (
    ENFORCED_BY_USER_PREFERENCES,
    SOURCE_NOT_FOUND,
    EvaluationResult,
)
from halal_core.normalization.normalizer import id_to_words, normalize_ingredient_id

logger = logging.getLogger(__name__)

PreferencesLike = Union[Preferences, dict, None]


@dataclass(frozen=True)
class ClassificationOverride:
    """Ruling supplied from outside the knowledge base (e.g. a remote classification service)."""
    status: Status
    source: str
    confidence_impact: int = 0
    notes: str = ""
    references: tuple[str, ...] = field(default_factory=tuple)


class HalalEvaluator:
    """
    evaluate_item(id, preferences) -> EvaluationResult.
    The store is injected and read-only; the evaluator keeps no per-call state.
    """

    def __init__(self, store: KnowledgeStore):
        self._store = store
        self._resolver = InheritanceResolver(store)

    @property
    def store(self) -> KnowledgeStore:
        return self._store

    def evaluate_item(self, ingredient_id: str, preferences: PreferencesLike = None) -> EvaluationResult:
        prefs = Preferences.coerce(preferences)
        key = normalize_ingredient_id(ingredient_id)
        node = self._resolver.resolve(key, prefs) if key else None
        if node is None:
            return self._unknown_result(key or str(ingredient_id or ""), prefs)

        decision = apply_policy(node.record, prefs.strictness, prefs.madhab)
        has_inheritance = node.inherited_from is not None
        score = score_confidence(decision.status, node.confidence_impact, prefs.strictness, has_inheritance)

        trace = list(node.trace)
        if decision.status != node.record.status:
            trace.append(
                f"{node.record.id} ruled {decision.status.value} "
                f"(strictness={prefs.strictness.value}, madhab={prefs.madhab})"
            )

        result = EvaluationResult(
            ingredient_id=node.record.id,
            status=decision.status,
            confidence_score=score,
            confidence_level=confidence_level(score),
            confidence_impact=node.confidence_impact,
            display_name=node.display_name,
            trace=tuple(trace),
            inherited_from=node.inherited_from,
            alternatives=node.alternatives,
            references=node.references,
            tags=node.tags,
            notes=node.notes,
            eli5=node.eli5,
            enforced_by=ENFORCED_BY_USER_PREFERENCES if decision.enforced else None,
            preferences=prefs.to_dict() if decision.enforced else None,
        )
        logger.debug(
            "EVALUATE id=%s status=%s score=%d inherited_from=%s enforced=%s chain=%s",
            result.ingredient_id, result.status.value, score, result.inherited_from, decision.enforced,
            node.visited,
        )
        return result

    def _unknown_result(self, key: str, prefs: Preferences) -> EvaluationResult:
        logger.info("UNKNOWN_INGREDIENT id=%s", key)
        score = score_confidence(Status.UNKNOWN, 0, prefs.strictness, False)
        return EvaluationResult(
            ingredient_id=key,
            status=Status.UNKNOWN,
            confidence_score=score,
            confidence_level=confidence_level(score),
            confidence_impact=0,
            display_name=id_to_words(key),
            trace=(f"Unknown item: {key}",),
            source=SOURCE_NOT_FOUND,
        )

    def apply_override(
        self,
        result: EvaluationResult,
        override: ClassificationOverride,
        preferences: PreferencesLike = None,
    ) -> EvaluationResult:
        """New result carrying the override's ruling; the original result is left as is."""
        prefs = Preferences.coerce(preferences)
        impact = override.confidence_impact or result.confidence_impact
        score = score_confidence(override.status, impact, prefs.strictness, result.inherited_from is not None)
        references = tuple(dict.fromkeys(result.references + tuple(override.references)))
        logger.info(
            "CLASSIFICATION_OVERRIDE id=%s %s->%s source=%s",
            result.ingredient_id, result.status.value, override.status.value, override.source,
        )
        return replace(
            result,
            status=override.status,
            confidence_score=score,
            confidence_level=confidence_level(score),
            confidence_impact=impact,
            trace=result.trace + (f"{override.source} classified {result.ingredient_id} as {override.status.value}",),
            references=references,
            notes=override.notes or result.notes,
            source=f"remote:{override.source}",
        )

    def is_known(self, name: str) -> bool:
        return name in self._store

    def get_details(self, name: str, preferences: PreferencesLike = None) -> EvaluationResult:
        """Free-form ingredient name ('Red Wine', 'e441') -> evaluation."""
        return self.evaluate_item(normalize_ingredient_id(name), preferences)
