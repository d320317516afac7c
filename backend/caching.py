"""
File-backed cache of successful recipe conversions, for offline replay of the
most recent result. Entries are keyed by the SHA-256 of the recipe text.
"""
import json
import os
import hashlib
import logging
import time
from pathlib import Path
from typing import Optional, Union

from halal_core.config import get_conversion_cache_path
from halal_core.models.results import ConversionResult

logger = logging.getLogger(__name__)

PathLike = Union[str, Path, None]


def _cache_file(path: PathLike) -> Path:
    return Path(path) if path else get_conversion_cache_path()


def get_cache_key(recipe_text: str):
    """Generates a unique key for the recipe text."""
    return hashlib.sha256((recipe_text or "").strip().encode("utf-8")).hexdigest()


def load_cache(path: PathLike = None):
    cache_file = _cache_file(path)
    if not os.path.exists(cache_file):
        return {"entries": {}, "last_key": None}
    try:
        with open(cache_file, "r", encoding="utf-8") as f:
            cache = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("CACHE unreadable at %s, starting empty: %s", cache_file, e)
        return {"entries": {}, "last_key": None}
    cache.setdefault("entries", {})
    cache.setdefault("last_key", None)
    return cache


def save_cache(cache, path: PathLike = None):
    cache_file = _cache_file(path)
    cache_file.parent.mkdir(parents=True, exist_ok=True)
    with open(cache_file, "w", encoding="utf-8") as f:
        json.dump(cache, f, indent=2)


def cache_conversion(result: ConversionResult, path: PathLike = None) -> bool:
    """Store a successful conversion and mark it as the most recent. Failed results are not cached."""
    if not result.ok:
        logger.debug("CACHE skip failed conversion error=%s", result.error)
        return False
    key = get_cache_key(result.original_text)
    cache = load_cache(path)
    cache["entries"][key] = {"timestamp": time.time(), "result": result.to_dict()}
    cache["last_key"] = key
    save_cache(cache, path)
    logger.info("CACHE stored conversion key=%s issues=%d", key[:12], len(result.issues))
    return True


def _entry_to_result(entry) -> Optional[tuple[ConversionResult, float]]:
    try:
        return ConversionResult.from_dict(entry["result"]), float(entry.get("timestamp", 0))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("CACHE malformed entry skipped: %s", e)
        return None


def get_cached_conversion(recipe_text: str, path: PathLike = None) -> Optional[tuple[ConversionResult, float]]:
    """(result, timestamp) for this exact recipe text, or None."""
    entry = load_cache(path)["entries"].get(get_cache_key(recipe_text))
    return _entry_to_result(entry) if entry else None


def get_last_conversion(path: PathLike = None) -> Optional[tuple[ConversionResult, float]]:
    """(result, timestamp) of the most recently cached conversion, or None."""
    cache = load_cache(path)
    key = cache.get("last_key")
    entry = cache["entries"].get(key) if key else None
    return _entry_to_result(entry) if entry else None
