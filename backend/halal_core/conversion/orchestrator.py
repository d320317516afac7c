"""
Recipe conversion: detect -> substitute -> score.
All three phases always run; the aggregate score is computed from the final
state of every issue, never from per-ingredient confidence.
"""
from typing import Optional
import logging

from halal_core.conversion.detector import IngredientDetector
from halal_core.conversion.substitution import Substituter
from halal_core.evaluation.confidence import aggregate_confidence
from halal_core.evaluation.evaluator import HalalEvaluator, PreferencesLike
from halal_core.models.preferences import Preferences
from halal_core.models.results import (
    CONFIDENCE_TYPE_CLASSIFICATION,
    CONFIDENCE_TYPE_POST_CONVERSION,
    ConversionResult,
)

logger = logging.getLogger(__name__)

ERROR_INVALID_INPUT = "invalid_input"
ERROR_CONVERSION_FAILED = "conversion_failed"


class RecipeConverter:
    def __init__(self, evaluator: HalalEvaluator, detector: Optional[IngredientDetector] = None):
        self._evaluator = evaluator
        self._detector = detector or IngredientDetector(evaluator)
        self._substituter = Substituter(evaluator.store, self._detector.scanner)

    @property
    def evaluator(self) -> HalalEvaluator:
        return self._evaluator

    @property
    def detector(self) -> IngredientDetector:
        return self._detector

    def convert(self, recipe_text: str, preferences: PreferencesLike = None) -> ConversionResult:
        """
        Never raises. Malformed input gives an empty result with error 'invalid_input';
        any failure inside the pipeline returns the original text with score 0.
        """
        if not isinstance(recipe_text, str) or not recipe_text.strip():
            logger.warning("CONVERSION rejected malformed input type=%s", type(recipe_text).__name__)
            return ConversionResult(
                original_text=recipe_text if isinstance(recipe_text, str) else "",
                converted_text="",
                aggregate_confidence_score=0,
                error=ERROR_INVALID_INPUT,
            )

        text = recipe_text.strip()
        try:
            prefs = Preferences.coerce(preferences)
            issues = self._detector.detect(text, prefs)
            outcome = self._substituter.substitute(text, issues)
            score = aggregate_confidence(outcome.issues)
        except Exception as e:
            logger.error("CONVERSION failed: %s", e, exc_info=True)
            return ConversionResult(
                original_text=recipe_text,
                converted_text=recipe_text,
                aggregate_confidence_score=0,
                error=f"{ERROR_CONVERSION_FAILED}: {type(e).__name__}",
            )

        changed = outcome.converted_text != text
        logger.info(
            "CONVERSION issues=%d replaced=%d unresolved=%d score=%d",
            len(outcome.issues), len(outcome.replaced), len(outcome.unresolved), score,
        )
        return ConversionResult(
            original_text=text,
            converted_text=outcome.converted_text,
            issues=outcome.issues,
            aggregate_confidence_score=score,
            confidence_type=CONFIDENCE_TYPE_POST_CONVERSION if changed else CONFIDENCE_TYPE_CLASSIFICATION,
            unresolved=outcome.unresolved,
        )
