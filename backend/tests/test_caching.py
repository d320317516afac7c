"""
Unit tests for the conversion cache (offline replay).
Run from backend: python -m pytest tests/test_caching.py -v
"""
from halal_core.knowledge.record_schema import Status
from halal_core.models.results import ConversionResult, DetectedIssue, EvaluationResult


def _result(text="4 slices bacon", error=None):
    evaluation = EvaluationResult(
        ingredient_id="bacon", status=Status.HARAM, confidence_score=0,
        confidence_level="low", inherited_from="pork", references=("Qur'an 2:173",),
    )
    issue = DetectedIssue(
        ingredient_id="bacon", matched_text="bacon", status=Status.HARAM,
        replacement_id="turkey_bacon", evaluation=evaluation,
        was_replaced=True, replacement_text="turkey bacon",
    )
    return ConversionResult(
        original_text=text,
        converted_text=text.replace("bacon", "turkey bacon"),
        issues=(issue,),
        aggregate_confidence_score=100,
        confidence_type="post_conversion",
        error=error,
    )


def test_cache_key_ignores_surrounding_whitespace():
    from caching import get_cache_key
    assert get_cache_key("4 slices bacon") == get_cache_key("  4 slices bacon\n")
    assert get_cache_key("4 slices bacon") != get_cache_key("4 slices ham")


def test_empty_cache(tmp_path):
    from caching import get_last_conversion, get_cached_conversion
    path = tmp_path / "cache.json"
    assert get_last_conversion(path) is None
    assert get_cached_conversion("anything", path) is None


def test_cache_and_replay(tmp_path):
    from caching import cache_conversion, get_cached_conversion, get_last_conversion
    path = tmp_path / "sub" / "cache.json"
    first, second = _result("4 slices bacon"), _result("2 slices bacon, toasted")
    assert cache_conversion(first, path)
    assert cache_conversion(second, path)

    last, ts = get_last_conversion(path)
    assert last == second
    assert ts > 0
    cached, _ = get_cached_conversion("4 slices bacon", path)
    assert cached == first


def test_failed_conversion_not_cached(tmp_path):
    from caching import cache_conversion, get_last_conversion
    path = tmp_path / "cache.json"
    assert cache_conversion(_result(error="conversion_failed: RuntimeError"), path) is False
    assert get_last_conversion(path) is None
    assert not path.exists()


def test_corrupt_cache_file(tmp_path):
    from caching import cache_conversion, get_last_conversion
    path = tmp_path / "cache.json"
    path.write_text("{oops")
    assert get_last_conversion(path) is None
    cache_conversion(_result(), path)
    assert get_last_conversion(path)[0] == _result()
