"""
Deterministic normalization only. No fuzzy or substring guessing.
Produces canonical ids for knowledge lookup and the separator variants used
when scanning free text.
"""
import re
import logging
from typing import List

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s_\-–—]+")
_DISALLOWED = re.compile(r"[^a-z0-9_']")

# Spellings that differ from the canonical id in a way aliases should not have to repeat.
KNOWN_VARIANTS: dict[str, str] = {
    "gelatine": "gelatin",
    "l_cystine": "l_cysteine",
    "mono_and_diglycerides": "mono_diglycerides",
    "monodiglycerides": "mono_diglycerides",
    "marshmallow": "marshmallows",
    "parmigiano": "parmesan",
}


def normalize_ingredient_id(text: str) -> str:
    """
    Normalize a raw ingredient name to an id-shaped key.
    - Lowercase, strip, collapse spaces/hyphens/underscores to a single underscore.
    - Drop punctuation other than apostrophes.
    - Apply KNOWN_VARIANTS.
    """
    if not text or not isinstance(text, str):
        return ""
    t = text.lower().strip()
    t = t.replace("*", "").replace(".", "")
    t = _SEPARATORS.sub("_", t)
    t = _DISALLOWED.sub("", t).strip("_")
    if t in KNOWN_VARIANTS:
        canonical = KNOWN_VARIANTS[t]
        logger.debug("NORMALIZE variant applied raw=%s -> canonical=%s", t, canonical)
        return canonical
    return t


def search_variants(term: str) -> List[str]:
    """
    Separator forms of a term for whole-word text search:
    as written, then underscore, space and hyphen forms. Order is stable, no duplicates.

    'red_wine' -> ['red_wine', 'red wine', 'red-wine']
    """
    if not term:
        return []
    base = term.lower().strip()
    parts = [p for p in _SEPARATORS.split(base) if p]
    variants = [base]
    if len(parts) > 1:
        for sep in ("_", " ", "-"):
            variants.append(sep.join(parts))
    return list(dict.fromkeys(variants))


def normalize_school_key(school: str) -> str:
    """School-of-thought key: Shafi'i -> shafii, No Preference -> no-preference."""
    if not school or not isinstance(school, str):
        return ""
    t = school.lower().strip().replace("'", "").replace("’", "")
    if t.replace("_", " ").replace("-", " ") in ("no preference", "none", "any"):
        return "no-preference"
    return re.sub(r"[\s_\-]+", "", t)


def id_to_words(ingredient_id: str) -> str:
    """'turkey_bacon' -> 'turkey bacon'."""
    return (ingredient_id or "").replace("_", " ").strip()
