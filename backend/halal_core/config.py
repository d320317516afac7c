"""
Paths, defaults, and centralized configuration.
All resolution relative to the backend directory.
"""
import os
import logging
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# Repo root: backend/halal_core/config.py -> parent=halal_core, parent.parent=backend, parent.parent.parent=repo
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_REPO_ROOT = _BACKEND_DIR.parent

_TRUE_VALUES = ("1", "true", "yes")

# Load order matters: later files override earlier ones on id collision.
_DEFAULT_KNOWLEDGE_FILES = (
    "legacy_knowledge.json",
    "halal_knowledge.json",
)


# --- Data paths ---
def get_knowledge_dir() -> Path:
    return _REPO_ROOT / "data" / "knowledge"


def get_knowledge_paths() -> List[Path]:
    """Knowledge files in merge order. KNOWLEDGE_FILES (os.pathsep separated) overrides the defaults."""
    raw = os.environ.get("KNOWLEDGE_FILES", "").strip()
    if raw:
        return [Path(p).expanduser() for p in raw.split(os.pathsep) if p.strip()]
    return [get_knowledge_dir() / name for name in _DEFAULT_KNOWLEDGE_FILES]


def get_conversion_cache_path() -> Path:
    raw = os.environ.get("CONVERSION_CACHE_PATH", "").strip()
    return Path(raw) if raw else _REPO_ROOT / "data" / "conversion_cache.json"


def get_unknown_ingredients_log_path() -> Path:
    raw = os.environ.get("UNKNOWN_INGREDIENTS_LOG_PATH", "").strip()
    return Path(raw) if raw else _REPO_ROOT / "data" / "unknown_ingredients_log.json"


def get_log_unknown_ingredients() -> bool:
    return os.environ.get("LOG_UNKNOWN_INGREDIENTS", "true").lower() in _TRUE_VALUES


# --- Policy defaults ---
def get_default_strictness() -> str:
    return os.environ.get("DEFAULT_STRICTNESS", "standard").strip().lower() or "standard"


def get_default_madhab() -> str:
    return os.environ.get("DEFAULT_MADHAB", "no-preference").strip().lower() or "no-preference"


# --- Remote classification fallback (lazy read from env) ---
def get_remote_classifier_url() -> Optional[str]:
    url = os.environ.get("REMOTE_CLASSIFIER_URL", "").strip()
    return url or None


def get_remote_classifier_timeout() -> int:
    return int(os.environ.get("REMOTE_CLASSIFIER_TIMEOUT", "10"))


# --- Startup logging ---
def log_config() -> None:
    paths = get_knowledge_paths()
    logger.info(
        "CONFIG: knowledge_files=%s present=%s default_strictness=%s default_madhab=%s "
        "remote_classifier=%s cache=%s log_unknown=%s",
        [p.name for p in paths], [p.exists() for p in paths],
        get_default_strictness(), get_default_madhab(),
        bool(get_remote_classifier_url()), get_conversion_cache_path(),
        get_log_unknown_ingredients(),
    )
