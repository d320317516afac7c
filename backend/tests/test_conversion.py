"""
Recipe conversion against the shipped knowledge base: detection, substitution,
aggregate scoring, idempotence, fallback on failure.
Run from backend: python -m pytest tests/test_conversion.py -v
"""
import re
import pytest
from unittest.mock import MagicMock

from halal_core.knowledge.record_schema import Status
from halal_core.models.results import (
    CONFIDENCE_TYPE_CLASSIFICATION,
    CONFIDENCE_TYPE_POST_CONVERSION,
    ConversionResult,
)

STANDARD = {"strictnessLevel": "standard", "schoolOfThought": "no-preference"}
STRICT = {"strictnessLevel": "strict", "schoolOfThought": "no-preference"}


@pytest.fixture(scope="module")
def converter():
    from halal_core.config import get_knowledge_paths
    from halal_core.conversion.orchestrator import RecipeConverter
    from halal_core.evaluation.evaluator import HalalEvaluator
    from halal_core.knowledge.knowledge_store import KnowledgeStore
    paths = get_knowledge_paths()
    if not all(p.exists() for p in paths):
        pytest.skip("knowledge files not found under data/knowledge")
    return RecipeConverter(HalalEvaluator(KnowledgeStore.from_files(paths)))


def _issue(result, ingredient_id):
    matches = [i for i in result.issues if i.ingredient_id == ingredient_id]
    assert len(matches) == 1, [i.ingredient_id for i in result.issues]
    return matches[0]


# --- detection ---

def test_detect_bacon(converter):
    issues = converter.detector.detect("4 slices bacon", STANDARD)
    assert len(issues) == 1
    issue = issues[0]
    assert issue.ingredient_id == "bacon"
    assert issue.matched_text == "bacon"
    assert issue.status == Status.HARAM
    assert issue.replacement_id == "turkey_bacon"
    assert issue.evaluation.inherited_from == "pork"
    assert issue.validation_state == "derived_haram"
    assert issue.quran_reference == "Qur'an 2:173"
    assert issue.was_replaced is False


@pytest.mark.parametrize("text", [
    "2 slices turkey bacon",
    "1 tbsp red wine vinegar",
    "3 cups vegetable broth",
    "1/2 cup halal-certified parmesan",
    "baconator seasoning",
    "Boil water, add salt.",
    "",
])
def test_detect_nothing_flagged(converter, text):
    assert converter.detector.detect(text, STANDARD) == []


def test_detect_one_issue_per_ingredient_keeps_first_text(converter):
    issues = converter.detector.detect("Bacon, more bacon and BACON", STANDARD)
    assert [i.ingredient_id for i in issues] == ["bacon"]
    assert issues[0].matched_text == "Bacon"


def test_detect_separator_variants_and_aliases(converter):
    issues = converter.detector.detect("1 cup red-wine, 2 tbsp E441, 1 tsp cochineal", STRICT)
    assert [i.ingredient_id for i in issues] == ["wine", "gelatin", "carmine"]
    assert issues[0].matched_text == "red-wine"
    assert issues[1].matched_text == "E441"


def test_detect_orders_by_first_appearance(converter):
    issues = converter.detector.detect("1 cup wine, 2 slices ham, 1 cup wine", STANDARD)
    assert [i.ingredient_id for i in issues] == ["wine", "ham"]


def test_detect_conditional_with_ratio(converter):
    issue = converter.detector.detect("1 packet gelatin", STANDARD)[0]
    assert issue.status == Status.CONDITIONAL
    assert issue.replacement_id == "agar_agar"
    assert issue.conversion_ratio == "1:0.5"
    assert issue.validation_state == "verification_required"
    assert issue.severity == "medium"


def test_detect_questionable_only_when_strict(converter):
    assert converter.detector.detect("1 tsp natural flavors", STANDARD) == []
    issues = converter.detector.detect("1 tsp natural flavors", STRICT)
    assert [(i.ingredient_id, i.status) for i in issues] == [("natural_flavors", Status.HARAM)]
    assert issues[0].replacement_id is None


def test_detect_school_ruling(converter):
    prefs = {"strictnessLevel": "strict", "schoolOfThought": "Hanafi"}
    issues = converter.detector.detect("1 lb prawns", prefs)
    assert len(issues) == 1
    assert issues[0].ingredient_id == "shrimp"
    assert issues[0].status == Status.HARAM
    assert issues[0].validation_state == "preference_based"
    assert converter.detector.detect("1 lb prawns", STANDARD) == []


# --- conversion ---

def test_convert_bacon(converter):
    result = converter.convert("4 slices bacon", STANDARD)
    assert result.converted_text == "4 slices turkey bacon"
    assert re.search(r"(?<!turkey )\bbacon\b", result.converted_text) is None
    assert result.aggregate_confidence_score == 100
    assert result.confidence_type == CONFIDENCE_TYPE_POST_CONVERSION
    issue = _issue(result, "bacon")
    assert issue.was_replaced
    assert issue.replacement_text == "turkey bacon"
    assert result.unresolved == ()
    assert result.ok


def test_convert_wine_scenario(converter):
    result = converter.convert("Beef Bourguignon: 1 cup red wine, 2 lbs beef", STANDARD)
    wine = _issue(result, "wine")
    assert wine.status == Status.HARAM
    assert wine.replacement_id
    assert "grape" in wine.replacement_id
    assert "wine" not in result.converted_text.lower()
    assert "grape juice" in result.converted_text
    assert result.aggregate_confidence_score == 100


def test_convert_parmesan_scenario(converter):
    result = converter.convert("Pasta: 1 cup parmesan cheese", STANDARD)
    parmesan = _issue(result, "parmesan")
    assert parmesan.status in (Status.CONDITIONAL, Status.QUESTIONABLE)
    explanation = (parmesan.evaluation.notes + " " + parmesan.evaluation.eli5).lower()
    assert "rennet" in explanation
    assert parmesan.replacement_id == "halal_certified_parmesan"
    assert result.converted_text == "Pasta: 1 cup halal-certified parmesan"


def test_convert_zero_ingredients(converter):
    result = converter.convert("Boil water, add salt.", STANDARD)
    assert result.issues == ()
    assert result.aggregate_confidence_score == 100
    assert result.converted_text == "Boil water, add salt."
    assert result.confidence_type == CONFIDENCE_TYPE_CLASSIFICATION


def test_convert_unresolved_haram(converter):
    result = converter.convert("Stir in 2 tbsp blood", STANDARD)
    assert result.converted_text == "Stir in 2 tbsp blood"
    assert result.unresolved == ("blood",)
    assert result.aggregate_confidence_score == 80
    assert result.confidence_type == CONFIDENCE_TYPE_CLASSIFICATION
    assert _issue(result, "blood").validation_state == "explicit_haram"


def test_convert_partial_resolution(converter):
    result = converter.convert("1 cup wine, 1 tsp blood, 1 tsp natural flavors", STRICT)
    assert "grape juice" in result.converted_text
    assert set(result.unresolved) == {"blood", "natural_flavors"}
    # two unresolved haram (strict escalates natural flavors)
    assert result.aggregate_confidence_score == 60
    assert result.confidence_type == CONFIDENCE_TYPE_POST_CONVERSION


def test_convert_strict_vs_standard(converter):
    assert converter.convert("1 tsp natural flavors", STANDARD).aggregate_confidence_score == 100
    assert converter.convert("1 tsp natural flavors", STRICT).aggregate_confidence_score == 80


def test_convert_preserves_case(converter):
    result = converter.convert("Bacon and eggs. Deglaze with RED WINE, then add Red Wine.", STANDARD)
    assert result.converted_text == "Turkey bacon and eggs. Deglaze with GRAPE JUICE, then add Grape Juice."


def test_convert_replaces_every_alias_occurrence(converter):
    result = converter.convert("1 cup red wine and 1 cup wine", STANDARD)
    assert result.converted_text == "1 cup grape juice and 1 cup grape juice"
    assert len(result.issues) == 1


@pytest.mark.parametrize("recipe", [
    "4 slices bacon",
    "Beef Bourguignon: 1 cup red wine, 2 lbs beef",
    "Pasta: 1 cup parmesan cheese",
    "Teriyaki Chicken: 1/2 cup teriyaki sauce, 2 chicken thighs, 1 tbsp mirin",
    "Pizza: pepperoni, ham, 1 tsp lard. Dessert: marshmallows, 1 tsp vanilla extract, 2 tbsp gelatin",
])
def test_convert_idempotent(converter, recipe):
    first = converter.convert(recipe, STANDARD)
    assert first.unresolved == ()
    second = converter.convert(first.converted_text, STANDARD)
    assert second.converted_text == first.converted_text
    assert second.issues == ()
    assert second.aggregate_confidence_score == 100


def test_convert_multi_level_chain(converter):
    result = converter.convert("1/2 cup teriyaki sauce", STANDARD)
    issue = _issue(result, "teriyaki_sauce")
    assert issue.status == Status.CONDITIONAL
    assert issue.evaluation.inherited_from == "alcohol"
    assert "mirin is haram" in issue.evaluation.trace


@pytest.mark.parametrize("bad", [None, "", "   \n\t", 42, ["bacon"]])
def test_convert_invalid_input(converter, bad):
    result = converter.convert(bad, STANDARD)
    assert result.error == "invalid_input"
    assert result.issues == ()
    assert result.aggregate_confidence_score == 0
    assert not result.ok


def test_convert_failure_falls_back_to_original():
    from halal_core.conversion.orchestrator import RecipeConverter
    from halal_core.evaluation.evaluator import HalalEvaluator
    from halal_core.knowledge.knowledge_store import KnowledgeStore
    detector = MagicMock()
    detector.detect.side_effect = RuntimeError("boom")
    detector.scanner.scan.return_value = []
    conv = RecipeConverter(HalalEvaluator(KnowledgeStore()), detector=detector)
    result = conv.convert("4 slices bacon", STANDARD)
    assert result.converted_text == "4 slices bacon"
    assert result.original_text == "4 slices bacon"
    assert result.issues == ()
    assert result.aggregate_confidence_score == 0
    assert result.error.startswith("conversion_failed")


def test_conversion_result_round_trip(converter):
    result = converter.convert("Pizza: pepperoni, 1 tsp blood", STANDARD)
    assert ConversionResult.from_dict(result.to_dict()) == result


def test_module_level_helpers():
    from halal_core import convert_recipe, evaluate_item
    from halal_core.config import get_knowledge_paths
    if not all(p.exists() for p in get_knowledge_paths()):
        pytest.skip("knowledge files not found under data/knowledge")
    assert evaluate_item("bacon", {"strictness": "standard", "madhab": "no-preference"}).status == Status.HARAM
    assert convert_recipe("4 slices bacon", STANDARD).converted_text == "4 slices turkey bacon"
