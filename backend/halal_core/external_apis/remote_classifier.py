"""
Remote classification fallback for ingredients the knowledge base does not know.

Request:  POST {url} {"ingredient": "<id>", "display_name": "<words>"}
Response: {"status": "halal|haram|conditional|questionable", "source"?: str,
           "confidence_impact"?: int, "notes"?: str, "references"?: [str]}
Anything else (network failure, non-2xx, bad JSON, unusable status) -> None.
"""
import hashlib
import logging
import time
from typing import Any, Optional

from halal_core.config import get_remote_classifier_timeout, get_remote_classifier_url
from halal_core.evaluation.evaluator import ClassificationOverride
from halal_core.external_apis.http_retry import DEFAULT_INITIAL_BACKOFF, post_with_retries
from halal_core.knowledge.record_schema import Status
from halal_core.normalization.normalizer import id_to_words, normalize_ingredient_id

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "remote_classifier"
_ACCEPTED = (Status.HALAL, Status.HARAM, Status.CONDITIONAL, Status.QUESTIONABLE)

_CACHE_MAX_ENTRIES = 500
_CACHE_TTL_SECONDS = 3600  # 1 hour


def _cache_key(ingredient_id: str) -> str:
    return hashlib.sha256(ingredient_id.encode()).hexdigest()[:32]


def parse_classification(payload: Any) -> Optional[ClassificationOverride]:
    """Validate a response body. Returns None for anything that is not a usable ruling."""
    if not isinstance(payload, dict):
        return None
    raw_status = str(payload.get("status") or "").strip().lower()
    try:
        status = Status(raw_status)
    except ValueError:
        return None
    if status not in _ACCEPTED:
        return None
    try:
        impact = int(payload.get("confidence_impact") or 0)
    except (TypeError, ValueError):
        impact = 0
    references = payload.get("references") or []
    if not isinstance(references, list):
        references = [str(references)]
    return ClassificationOverride(
        status=status,
        source=str(payload.get("source") or DEFAULT_SOURCE),
        confidence_impact=impact,
        notes=str(payload.get("notes") or ""),
        references=tuple(str(r) for r in references if r),
    )


class RemoteClassifier:
    """
    classify(id) -> ClassificationOverride | None.
    Disabled (always None, no network) when no URL is configured.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[int] = None,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        use_cache: bool = True,
    ):
        self._url = url if url is not None else get_remote_classifier_url()
        self._timeout = timeout if timeout is not None else get_remote_classifier_timeout()
        self._initial_backoff = initial_backoff
        self._use_cache = use_cache
        self._cache: dict[str, tuple[Optional[ClassificationOverride], float]] = {}

    @property
    def enabled(self) -> bool:
        return bool(self._url)

    def classify(self, ingredient_id: str) -> Optional[ClassificationOverride]:
        key = normalize_ingredient_id(ingredient_id)
        if not self.enabled or not key:
            return None

        cache_key = _cache_key(key)
        if self._use_cache and cache_key in self._cache:
            cached, ts = self._cache[cache_key]
            if time.time() - ts < _CACHE_TTL_SECONDS:
                logger.debug("REMOTE_CLASSIFIER cache hit id=%s", key)
                return cached
            del self._cache[cache_key]

        result = self._fetch(key)
        if self._use_cache and len(self._cache) < _CACHE_MAX_ENTRIES:
            self._cache[cache_key] = (result, time.time())
        return result

    def _fetch(self, key: str) -> Optional[ClassificationOverride]:
        resp, err = post_with_retries(
            self._url,
            {"ingredient": key, "display_name": id_to_words(key)},
            timeout=self._timeout,
            initial_backoff=self._initial_backoff,
        )
        if resp is None:
            logger.warning("REMOTE_CLASSIFIER unreachable id=%s error=%s", key, err)
            return None
        if resp.status_code != 200:
            logger.warning("REMOTE_CLASSIFIER id=%s http_status=%s", key, resp.status_code)
            return None
        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("REMOTE_CLASSIFIER invalid JSON id=%s: %s", key, e)
            return None
        override = parse_classification(payload)
        if override is None:
            logger.warning("REMOTE_CLASSIFIER unusable payload id=%s payload=%s", key, str(payload)[:120])
            return None
        logger.info(
            "REMOTE_CLASSIFIER resolved id=%s status=%s source=%s",
            key, override.status.value, override.source,
        )
        return override

    def clear_cache(self) -> None:
        self._cache = {}
