"""
Structured evaluation and conversion results. One canonical shape per concept;
dict conversion happens at the boundary only.
"""
from dataclasses import dataclass
from typing import Any, Optional

from halal_core.knowledge.record_schema import Status

ENFORCED_BY_USER_PREFERENCES = "user_preferences"

CONFIDENCE_TYPE_CLASSIFICATION = "classification"
CONFIDENCE_TYPE_POST_CONVERSION = "post_conversion"

SOURCE_KNOWLEDGE_BASE = "knowledge_base"
SOURCE_NOT_FOUND = "not_found"

_QURAN_MARKERS = ("qur'an", "quran", "surah")
_HADITH_MARKERS = ("hadith", "bukhari", "muslim", "tirmidhi", "abu dawud", "nasa'i", "ibn majah")


def _first_reference(references: tuple[str, ...], markers: tuple[str, ...]) -> str:
    for ref in references:
        low = ref.lower()
        if any(m in low for m in markers):
            return ref
    return ""


@dataclass(frozen=True)
class EvaluationResult:
    ingredient_id: str
    status: Status
    confidence_score: int
    confidence_level: str
    confidence_impact: int = 0
    display_name: str = ""
    trace: tuple[str, ...] = ()
    inherited_from: Optional[str] = None
    alternatives: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    notes: str = ""
    eli5: str = ""
    enforced_by: Optional[str] = None
    preferences: Optional[dict[str, str]] = None
    source: str = SOURCE_KNOWLEDGE_BASE

    @property
    def is_known(self) -> bool:
        return self.source != SOURCE_NOT_FOUND

    def to_dict(self) -> dict[str, Any]:
        return {
            "ingredient_id": self.ingredient_id,
            "status": self.status.value,
            "confidence_score": self.confidence_score,
            "confidence_level": self.confidence_level,
            "confidence_impact": self.confidence_impact,
            "display_name": self.display_name,
            "trace": list(self.trace),
            "inherited_from": self.inherited_from,
            "alternatives": list(self.alternatives),
            "references": list(self.references),
            "tags": list(self.tags),
            "notes": self.notes,
            "eli5": self.eli5,
            "enforced_by": self.enforced_by,
            "preferences": dict(self.preferences) if self.preferences else None,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "EvaluationResult":
        return cls(
            ingredient_id=d["ingredient_id"],
            status=Status.parse(d.get("status")),
            confidence_score=int(d.get("confidence_score", 0)),
            confidence_level=d.get("confidence_level", "low"),
            confidence_impact=int(d.get("confidence_impact", 0)),
            display_name=d.get("display_name", ""),
            trace=tuple(d.get("trace", []) or []),
            inherited_from=d.get("inherited_from"),
            alternatives=tuple(d.get("alternatives", []) or []),
            references=tuple(d.get("references", []) or []),
            tags=tuple(d.get("tags", []) or []),
            notes=d.get("notes", "") or "",
            eli5=d.get("eli5", "") or "",
            enforced_by=d.get("enforced_by"),
            preferences=d.get("preferences"),
            source=d.get("source", SOURCE_KNOWLEDGE_BASE),
        )


@dataclass(frozen=True)
class DetectedIssue:
    ingredient_id: str
    matched_text: str
    status: Status
    replacement_id: Optional[str]
    evaluation: EvaluationResult
    was_replaced: bool = False
    replacement_text: Optional[str] = None
    conversion_ratio: str = "1:1"

    @property
    def validation_state(self) -> str:
        """preference_based | derived_haram | explicit_haram | verification_required"""
        if self.evaluation.enforced_by:
            return "preference_based"
        if self.status == Status.HARAM:
            return "derived_haram" if self.evaluation.inherited_from else "explicit_haram"
        return "verification_required"

    @property
    def severity(self) -> str:
        impact = self.evaluation.confidence_impact
        if impact <= -15:
            return "high"
        if impact <= -8:
            return "medium"
        return "low"

    @property
    def quran_reference(self) -> str:
        return _first_reference(self.evaluation.references, _QURAN_MARKERS)

    @property
    def hadith_reference(self) -> str:
        return _first_reference(self.evaluation.references, _HADITH_MARKERS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ingredient_id": self.ingredient_id,
            "matched_text": self.matched_text,
            "status": self.status.value,
            "replacement_id": self.replacement_id,
            "replacement_text": self.replacement_text,
            "was_replaced": self.was_replaced,
            "conversion_ratio": self.conversion_ratio,
            "validation_state": self.validation_state,
            "severity": self.severity,
            "quran_reference": self.quran_reference,
            "hadith_reference": self.hadith_reference,
            "evaluation": self.evaluation.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DetectedIssue":
        return cls(
            ingredient_id=d["ingredient_id"],
            matched_text=d.get("matched_text", ""),
            status=Status.parse(d.get("status")),
            replacement_id=d.get("replacement_id"),
            evaluation=EvaluationResult.from_dict(d["evaluation"]),
            was_replaced=bool(d.get("was_replaced", False)),
            replacement_text=d.get("replacement_text"),
            conversion_ratio=d.get("conversion_ratio", "1:1") or "1:1",
        )


@dataclass(frozen=True)
class ConversionResult:
    original_text: str
    converted_text: str
    issues: tuple[DetectedIssue, ...] = ()
    aggregate_confidence_score: int = 0
    confidence_type: str = CONFIDENCE_TYPE_CLASSIFICATION
    unresolved: tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_text": self.original_text,
            "converted_text": self.converted_text,
            "issues": [i.to_dict() for i in self.issues],
            "aggregate_confidence_score": self.aggregate_confidence_score,
            "confidence_type": self.confidence_type,
            "unresolved": list(self.unresolved),
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ConversionResult":
        return cls(
            original_text=d.get("original_text", ""),
            converted_text=d.get("converted_text", ""),
            issues=tuple(DetectedIssue.from_dict(i) for i in d.get("issues", []) or []),
            aggregate_confidence_score=int(d.get("aggregate_confidence_score", 0)),
            confidence_type=d.get("confidence_type", CONFIDENCE_TYPE_CLASSIFICATION),
            unresolved=tuple(d.get("unresolved", []) or []),
            error=d.get("error"),
        )
