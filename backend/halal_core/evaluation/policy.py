"""
Policy overlay: school-of-thought ruling, then strictness shift.
Data-driven; no per-ingredient branches.
"""
from dataclasses import dataclass
from typing import Optional

from halal_core.knowledge.record_schema import IngredientRecord, Status
from halal_core.models.preferences import NO_PREFERENCE, Strictness

# strictness -> {base ruling -> final ruling}
STRICTNESS_SHIFTS: dict[Strictness, dict[Status, Status]] = {
    Strictness.STRICT: {
        Status.QUESTIONABLE: Status.HARAM,
        Status.CONDITIONAL: Status.HARAM,
    },
    Strictness.STANDARD: {},
    Strictness.FLEXIBLE: {
        Status.QUESTIONABLE: Status.CONDITIONAL,
    },
}


@dataclass(frozen=True)
class PolicyDecision:
    status: Status
    default_status: Status
    # True only when a specific school was requested and the outcome differs from the default ruling
    enforced: bool = False


def apply_policy(
    record: IngredientRecord,
    strictness: Strictness = Strictness.STANDARD,
    school: Optional[str] = NO_PREFERENCE,
) -> PolicyDecision:
    has_school = bool(school) and school != NO_PREFERENCE
    default_status = record.default_ruling
    base = record.ruling_for(school if has_school else None)
    final = STRICTNESS_SHIFTS.get(strictness, {}).get(base, base)
    return PolicyDecision(
        status=final,
        default_status=default_status,
        enforced=has_school and final != default_status,
    )
