from .preferences import Preferences, Strictness, NO_PREFERENCE
from .results import (
    EvaluationResult,
    DetectedIssue,
    ConversionResult,
    ENFORCED_BY_USER_PREFERENCES,
    CONFIDENCE_TYPE_CLASSIFICATION,
    CONFIDENCE_TYPE_POST_CONVERSION,
)

__all__ = [
    "Preferences",
    "Strictness",
    "NO_PREFERENCE",
    "EvaluationResult",
    "DetectedIssue",
    "ConversionResult",
    "ENFORCED_BY_USER_PREFERENCES",
    "CONFIDENCE_TYPE_CLASSIFICATION",
    "CONFIDENCE_TYPE_POST_CONVERSION",
]
