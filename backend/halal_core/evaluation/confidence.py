"""
Confidence scores (0-100 integers). Pure functions; identical input -> identical output.

Per ingredient:
    score = (severity(status) * 100 + confidence_impact), floored at 0
    strict and severity <= 0.6        -> * 0.95
    flexible and borderline status    -> * 1.10
    ruling inferred through ancestors -> * 0.92
    round half up, clamp to [0, 100]

Per recipe (after substitution): 100 - 20 per unresolved haram - 10 per unresolved conditional;
100 when at least one haram ingredient was found and every one of them was replaced.
"""
import math
from typing import Iterable

from halal_core.knowledge.record_schema import Status
from halal_core.models.preferences import Strictness

BASE_SEVERITY: dict[Status, float] = {
    Status.HALAL: 1.0,
    Status.CONDITIONAL: 0.6,
    Status.QUESTIONABLE: 0.5,
    Status.UNKNOWN: 0.4,
    Status.HARAM: 0.0,
}
BORDERLINE = (Status.CONDITIONAL, Status.QUESTIONABLE)

STRICT_MULTIPLIER = 0.95
STRICT_SEVERITY_CEILING = 0.6
FLEXIBLE_MULTIPLIER = 1.10
INHERITANCE_MULTIPLIER = 0.92

UNRESOLVED_HARAM_PENALTY = 20
UNRESOLVED_CONDITIONAL_PENALTY = 10

CONFIDENCE_THRESHOLDS = {
    "high": 80,
    "medium": 50,
}


def _clamp(value: float) -> int:
    return max(0, min(100, int(math.floor(value + 0.5))))


def score_confidence(
    status: Status,
    confidence_impact: int = 0,
    strictness: Strictness = Strictness.STANDARD,
    has_inheritance: bool = False,
) -> int:
    severity = BASE_SEVERITY.get(status, BASE_SEVERITY[Status.UNKNOWN])
    score = max(0.0, severity * 100 + confidence_impact)
    if strictness == Strictness.STRICT and severity <= STRICT_SEVERITY_CEILING:
        score *= STRICT_MULTIPLIER
    elif strictness == Strictness.FLEXIBLE and status in BORDERLINE:
        score *= FLEXIBLE_MULTIPLIER
    if has_inheritance:
        score *= INHERITANCE_MULTIPLIER
    return _clamp(score)


def confidence_level(score: int) -> str:
    """high (80-100), medium (50-79), low (0-49)."""
    if score >= CONFIDENCE_THRESHOLDS["high"]:
        return "high"
    if score >= CONFIDENCE_THRESHOLDS["medium"]:
        return "medium"
    return "low"


def aggregate_confidence(issues: Iterable) -> int:
    """
    Recipe-level score from the final state of each DetectedIssue (status, was_replaced).
    Never reads individual confidence scores: replacement decisions are not score-gated.
    """
    issues = list(issues)
    haram = [i for i in issues if i.status == Status.HARAM]
    if haram and all(i.was_replaced for i in haram):
        return 100
    unresolved_haram = sum(1 for i in haram if not i.was_replaced)
    unresolved_conditional = sum(
        1 for i in issues if i.status == Status.CONDITIONAL and not i.was_replaced
    )
    return _clamp(
        100
        - unresolved_haram * UNRESOLVED_HARAM_PENALTY
        - unresolved_conditional * UNRESOLVED_CONDITIONAL_PENALTY
    )
