"""
Schema migration for knowledge files.

v1 (legacy): JSON object keyed by ingredient id, free-form field names
    (default_status, contains/depends_on/inheritance, reason, halal_alternatives,
    school_of_thought_variation, quranic_reference, hadith_reference,
    confidence_score_base).
v2 (current): {"schema_version": 2, "knowledge_version": "...", "ingredients": [...]}
    with IngredientRecord fields.

The store only consumes v2; everything else goes through migrate_document first.
"""
import logging
from typing import Any, Dict, List, Optional

from halal_core.knowledge.record_schema import SCHEMA_VERSION, Status
from halal_core.normalization.normalizer import normalize_ingredient_id, normalize_school_key

logger = logging.getLogger(__name__)

LEGACY_SCHEMA_VERSION = 1

# confidence_score_base 1.0 -> 0, 0.1 -> -18
_LEGACY_IMPACT_SCALE = 20

_DERIVATION_KEYS = ("derived_from", "derives_from", "derivesFrom", "inheritance", "contains", "depends_on")


def detect_schema_version(doc: Any) -> int:
    if isinstance(doc, dict):
        if "schema_version" in doc:
            return int(doc["schema_version"])
        if isinstance(doc.get("ingredients"), list):
            return SCHEMA_VERSION
        return LEGACY_SCHEMA_VERSION
    raise ValueError(f"Unsupported knowledge document type: {type(doc).__name__}")


def legacy_impact(confidence_score_base: Optional[float]) -> int:
    """Map a legacy 0-1 confidence base onto a signed confidence impact."""
    if confidence_score_base is None:
        return 0
    try:
        base = min(1.0, max(0.0, float(confidence_score_base)))
    except (TypeError, ValueError):
        return 0
    return -int(round((1.0 - base) * _LEGACY_IMPACT_SCALE))


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


def _migrate_legacy_status(item: dict) -> str:
    raw = item.get("status") or item.get("default_status") or "unknown"
    return Status.parse(raw).value


def migrate_legacy_record(key: str, item: dict) -> Dict[str, Any]:
    """One v1 entry -> v2 record dict."""
    record_id = normalize_ingredient_id(key)
    status = _migrate_legacy_status(item)

    derived: List[str] = []
    for k in _DERIVATION_KEYS:
        if item.get(k):
            derived = _as_list(item[k])
            break

    references = _as_list(item.get("references"))
    for k in ("quranic_reference", "hadith_reference"):
        ref = (item.get(k) or "").strip()
        if ref and ref not in references:
            references.append(ref)

    rulings: Dict[str, str] = {}
    for school, ruling in (item.get("school_of_thought_variation") or {}).items():
        school_key = normalize_school_key(school)
        if school_key:
            rulings[school_key] = Status.parse(ruling, fallback=Status(status)).value

    name = item.get("name") or key
    return {
        "id": record_id,
        "display_name": str(name).replace("_", " ").strip().title(),
        "status": status,
        "aliases": [a.replace("_", " ") for a in _as_list(item.get("aliases"))],
        "derived_from": [normalize_ingredient_id(d) for d in derived],
        "rulings": rulings,
        "alternatives": [normalize_ingredient_id(a) for a in _as_list(item.get("alternatives") or item.get("halal_alternatives"))],
        "confidence_impact": legacy_impact(item.get("confidence_score_base")),
        "references": references,
        "notes": item.get("notes") or item.get("reason") or "",
        "eli5": item.get("eli5") or "",
        "category": item.get("category") or "",
        "conversion_ratio": item.get("conversion_ratio") or "1:1",
    }


def _normalize_current_record(item: dict) -> Dict[str, Any]:
    out = dict(item)
    out["id"] = normalize_ingredient_id(item.get("id", ""))
    out["derived_from"] = [normalize_ingredient_id(d) for d in item.get("derived_from", []) or []]
    out["alternatives"] = [normalize_ingredient_id(a) for a in item.get("alternatives", []) or []]
    out["rulings"] = {
        normalize_school_key(k) if k != "default" else k: v
        for k, v in (item.get("rulings") or {}).items()
    }
    return out


def migrate_document(doc: Any, source_name: str = "") -> Dict[str, Any]:
    """
    Convert a knowledge document of any supported version into a v2 document.
    Raises ValueError for an unsupported schema_version.
    """
    version = detect_schema_version(doc)
    if version == SCHEMA_VERSION:
        ingredients = [
            _normalize_current_record(item)
            for item in doc.get("ingredients", [])
            if isinstance(item, dict) and item.get("id")
        ]
        return {
            "schema_version": SCHEMA_VERSION,
            "knowledge_version": str(doc.get("knowledge_version", "0")),
            "ingredients": ingredients,
        }
    if version == LEGACY_SCHEMA_VERSION:
        ingredients = []
        for key, item in doc.items():
            if str(key).startswith("_") or not isinstance(item, dict):
                continue
            ingredients.append(migrate_legacy_record(key, item))
        logger.info(
            "KNOWLEDGE_MIGRATION v%d->v%d source=%s records=%d",
            LEGACY_SCHEMA_VERSION, SCHEMA_VERSION, source_name or "<memory>", len(ingredients),
        )
        return {
            "schema_version": SCHEMA_VERSION,
            "knowledge_version": str(doc.get("_knowledge_version", "legacy")),
            "ingredients": ingredients,
        }
    raise ValueError(f"Unsupported knowledge schema_version={version} source={source_name or '<memory>'}")
