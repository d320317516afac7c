"""
Unit tests for term scanning and text substitution on a small in-memory store.
Run from backend: python -m pytest tests/test_substitution.py -v
"""
import pytest

from halal_core.conversion.detector import IngredientDetector, TermScanner
from halal_core.conversion.substitution import Substituter, match_case
from halal_core.evaluation.evaluator import HalalEvaluator
from halal_core.knowledge.knowledge_store import KnowledgeStore
from halal_core.knowledge.record_schema import IngredientRecord, Status


@pytest.fixture(scope="module")
def store():
    return KnowledgeStore([[
        IngredientRecord(id="wine", display_name="Wine", status=Status.HARAM,
                         aliases=("red wine", "cooking wine"), alternatives=("grape_juice",)),
        IngredientRecord(id="grape_juice", display_name="Grape Juice", status=Status.HALAL),
        IngredientRecord(id="red_wine_vinegar", display_name="Red Wine Vinegar", status=Status.HALAL),
        IngredientRecord(id="rum", display_name="Rum", status=Status.HARAM, alternatives=("rum_extract_free",)),
        IngredientRecord(id="blood", display_name="Blood", status=Status.HARAM),
    ]])


@pytest.fixture(scope="module")
def detector(store):
    return IngredientDetector(HalalEvaluator(store))


@pytest.mark.parametrize("template,expected", [
    ("bacon", "turkey bacon"),
    ("Bacon", "Turkey bacon"),
    ("BACON", "TURKEY BACON"),
    ("Red Wine", "Grape Juice"),
    ("red Wine", "grape juice"),
    ("E441", "AGAR AGAR"),
    ("e441", "agar agar"),
])
def test_match_case(template, expected):
    replacement = "turkey bacon" if "acon" in template.lower() else (
        "grape juice" if "wine" in template.lower() else "agar agar")
    assert match_case(template, replacement) == expected


def test_scan_longest_first(store):
    scanner = TermScanner(store)
    matches = scanner.scan("Splash of red wine vinegar, then 1 cup Red Wine and wine")
    assert [(m.ingredient_id, m.text) for m in matches] == [
        ("red_wine_vinegar", "red wine vinegar"),
        ("wine", "Red Wine"),
        ("wine", "wine"),
    ]
    assert all(m.start < m.end for m in matches)


def test_scan_whole_word_only(store):
    scanner = TermScanner(store)
    assert scanner.scan("swine rummage wines") == []
    assert [m.text for m in scanner.scan("(wine)")] == ["wine"]


def test_substitute_replaces_and_reports(store, detector):
    text = "1 cup Cooking Wine; 1 tbsp blood; 2 tbsp wine"
    issues = detector.detect(text)
    outcome = Substituter(store, detector.scanner).substitute(text, issues)
    assert outcome.converted_text == "1 cup Grape Juice; 1 tbsp blood; 2 tbsp grape juice"
    assert outcome.replaced == ("wine",)
    assert outcome.unresolved == ("blood",)
    by_id = {i.ingredient_id: i for i in outcome.issues}
    assert by_id["wine"].was_replaced
    assert by_id["wine"].replacement_text == "grape juice"
    assert not by_id["blood"].was_replaced
    # inputs are untouched
    assert not any(i.was_replaced for i in issues)


def test_substitute_skips_unknown_replacement(store, detector):
    text = "2 oz rum"
    issues = detector.detect(text)
    assert issues[0].replacement_id == "rum_extract_free"
    outcome = Substituter(store, detector.scanner).substitute(text, issues)
    assert outcome.converted_text == text
    assert outcome.unresolved == ("rum",)


def test_substitute_no_issues(store, detector):
    outcome = Substituter(store, detector.scanner).substitute("plain water", [])
    assert outcome.converted_text == "plain water"
    assert outcome.issues == ()
