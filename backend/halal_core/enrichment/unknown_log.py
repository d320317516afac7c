"""
Log of ingredients the knowledge base could not rule on: raw input, normalized key,
frequency, first/last seen, sample preferences and remote classification outcome.
Reviewed offline to decide which records to add next.
"""
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from halal_core.config import get_log_unknown_ingredients, get_unknown_ingredients_log_path

logger = logging.getLogger(__name__)

LOG_VERSION = "1.0"
_MAX_RAW_INPUTS = 20


class UnknownIngredientsLog:
    """
    In-memory log with optional persist to JSON.
    Keyed by normalized_key; each entry has raw_inputs (list), frequency, first_seen,
    last_seen, preferences_sample and remote_status.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_unknown_ingredients_log_path()
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            self._entries = data.get("unknown_ingredients", {})
        except (OSError, ValueError) as e:
            logger.warning("Unknown ingredients log load failed: %s", e)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(
                {"unknown_ingredients": self._entries, "version": LOG_VERSION},
                f,
                indent=2,
            )

    def record(
        self,
        raw_input: str,
        normalized_key: str,
        preferences: Optional[Dict[str, str]] = None,
        remote_status: Optional[str] = None,
        persist: bool = True,
    ) -> None:
        """Record or update an unknown ingredient."""
        if not normalized_key:
            return
        now = time.time()
        if normalized_key not in self._entries:
            self._entries[normalized_key] = {
                "normalized_key": normalized_key,
                "raw_inputs": [],
                "frequency": 0,
                "first_seen": now,
                "last_seen": now,
                "preferences_sample": None,
                "remote_status": None,
            }
        ent = self._entries[normalized_key]
        if raw_input and raw_input not in ent["raw_inputs"]:
            ent["raw_inputs"] = (ent["raw_inputs"] + [raw_input])[:_MAX_RAW_INPUTS]
        ent["frequency"] = ent.get("frequency", 0) + 1
        ent["last_seen"] = now
        if preferences and not ent.get("preferences_sample"):
            ent["preferences_sample"] = dict(preferences)
        if remote_status:
            ent["remote_status"] = remote_status
        if persist:
            self._save()
        logger.info(
            "UNKNOWN_INGREDIENT logged raw=%s normalized_key=%s frequency=%s",
            (raw_input or "")[:50], normalized_key, ent["frequency"],
        )

    def get_entries(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._entries)

    def get_keys_for_review(self, min_frequency: int = 1) -> List[str]:
        """Keys seen at least min_frequency times, most frequent first."""
        keys = [k for k, v in self._entries.items() if v.get("frequency", 0) >= min_frequency]
        return sorted(keys, key=lambda k: (-self._entries[k].get("frequency", 0), k))


_default_log: Optional[UnknownIngredientsLog] = None


def get_unknown_log(path: Optional[Path] = None) -> UnknownIngredientsLog:
    global _default_log
    if _default_log is None:
        _default_log = UnknownIngredientsLog(path)
    return _default_log


def log_unknown_ingredient(
    raw_input: str,
    normalized_key: str,
    preferences: Optional[Dict[str, str]] = None,
    remote_status: Optional[str] = None,
) -> None:
    """Convenience: record to the default log unless LOG_UNKNOWN_INGREDIENTS is off."""
    if not get_log_unknown_ingredients():
        return
    get_unknown_log().record(raw_input, normalized_key, preferences=preferences, remote_status=remote_status)
