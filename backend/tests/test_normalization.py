"""
Unit tests for deterministic normalization.
Run from backend: python -m pytest tests/test_normalization.py -v
"""
import pytest

from halal_core.normalization.normalizer import (
    id_to_words,
    normalize_ingredient_id,
    normalize_school_key,
    search_variants,
)


@pytest.mark.parametrize("raw,expected", [
    ("Red Wine", "red_wine"),
    ("  red-wine ", "red_wine"),
    ("red__wine", "red_wine"),
    ("Gelatine", "gelatin"),
    ("Parmigiano", "parmesan"),
    ("Mono- and Diglycerides", "mono_diglycerides"),
    ("E-441", "e_441"),
    ("natural flavors*", "natural_flavors"),
    ("", ""),
    (None, ""),
])
def test_normalize_ingredient_id(raw, expected):
    assert normalize_ingredient_id(raw) == expected


def test_search_variants():
    assert search_variants("red_wine") == ["red_wine", "red wine", "red-wine"]
    assert search_variants("Halal-Certified Parmesan") == [
        "halal-certified parmesan",
        "halal_certified_parmesan",
        "halal certified parmesan",
        "halal-certified-parmesan",
    ]
    assert search_variants("bacon") == ["bacon"]
    assert search_variants("") == []


@pytest.mark.parametrize("raw,expected", [
    ("Shafi'i", "shafii"),
    ("Hanafi", "hanafi"),
    ("no_preference", "no-preference"),
    ("No Preference", "no-preference"),
    ("", ""),
])
def test_normalize_school_key(raw, expected):
    assert normalize_school_key(raw) == expected


def test_id_to_words():
    assert id_to_words("turkey_bacon") == "turkey bacon"
