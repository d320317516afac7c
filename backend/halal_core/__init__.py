"""
Halal recipe conversion engine.

Single-ingredient evaluation over the knowledge graph and full-recipe conversion
(detect -> substitute -> score). The module-level helpers share one engine built
lazily from the configured knowledge files.
"""
from typing import Optional
import logging

from .conversion.detector import IngredientDetector, TermScanner
from .conversion.orchestrator import RecipeConverter
from .conversion.substitution import Substituter, SubstitutionOutcome
from .evaluation.evaluator import ClassificationOverride, HalalEvaluator, PreferencesLike
from .knowledge.knowledge_store import KnowledgeStore
from .knowledge.record_schema import IngredientRecord, Status
from .models.preferences import Preferences, Strictness
from .models.results import ConversionResult, DetectedIssue, EvaluationResult

logger = logging.getLogger(__name__)

_default_converter: Optional[RecipeConverter] = None


def get_default_converter() -> RecipeConverter:
    global _default_converter
    if _default_converter is None:
        store = KnowledgeStore.from_files()
        _default_converter = RecipeConverter(HalalEvaluator(store))
        logger.info("ENGINE ready records=%d version=%s", len(store), store.get_version())
    return _default_converter


def evaluate_item(ingredient_id: str, preferences: PreferencesLike = None) -> EvaluationResult:
    """evaluate_item('gelatin', {'strictness': 'strict', 'madhab': 'hanafi'})"""
    return get_default_converter().evaluator.evaluate_item(ingredient_id, preferences)


def convert_recipe(recipe_text: str, preferences: PreferencesLike = None) -> ConversionResult:
    """convert_recipe('4 slices bacon', {'strictnessLevel': 'standard', 'schoolOfThought': 'no-preference'})"""
    return get_default_converter().convert(recipe_text, preferences)


__all__ = [
    "ClassificationOverride",
    "ConversionResult",
    "DetectedIssue",
    "EvaluationResult",
    "HalalEvaluator",
    "IngredientDetector",
    "IngredientRecord",
    "KnowledgeStore",
    "Preferences",
    "RecipeConverter",
    "Status",
    "Strictness",
    "SubstitutionOutcome",
    "Substituter",
    "TermScanner",
    "convert_recipe",
    "evaluate_item",
    "get_default_converter",
]
