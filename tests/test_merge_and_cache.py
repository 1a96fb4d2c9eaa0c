from __future__ import annotations

import pytest

from baselineguard.cache import DetectionCache
from baselineguard.merge import merge_detections
from baselineguard.model import DetectedFeature, DetectionMethod, Position, SourceRange


def _detection(
    feature_id: str = "dialog",
    line: int = 0,
    column: int = 0,
    confidence: float = 0.9,
    method: DetectionMethod = "text",
) -> DetectedFeature:
    return DetectedFeature(
        feature_id=feature_id,
        rule_id=f"t.{feature_id}",
        range=SourceRange(Position(line, column), Position(line, column + 4)),
        confidence=confidence,
        severity_hint="information",
        baseline_status="newly",
        context_snippet="",
        detection_method=method,
    )


def test_higher_confidence_wins() -> None:
    low = _detection(confidence=0.6)
    high = _detection(column=7, confidence=0.9)

    assert merge_detections([low, high]) == [high]
    assert merge_detections([high, low]) == [high]


def test_ties_keep_first_detection() -> None:
    first = _detection(confidence=0.8, method="syntax")
    second = _detection(column=3, confidence=0.8)
    assert merge_detections([first, second]) == [first]


def test_merge_key_ignores_column_but_not_line_or_feature() -> None:
    detections = [
        _detection(line=0),
        _detection(line=1),
        _detection(feature_id="details", line=0),
        _detection(line=0, column=20),
    ]
    merged = merge_detections(detections)
    assert [(d.feature_id, d.line) for d in merged] == [
        ("dialog", 0),
        ("dialog", 1),
        ("details", 0),
    ]


def test_confidence_floor() -> None:
    detections = [
        _detection(line=0, confidence=0.59),
        _detection(line=1, confidence=0.6),
        _detection(line=2, confidence=1.0),
    ]
    merged = merge_detections(detections)
    assert [d.line for d in merged] == [1, 2]
    assert all(d.confidence >= 0.6 for d in merged)
    assert merge_detections(detections, floor=0.95) == [detections[2]]


def test_low_confidence_duplicate_does_not_mask_survivor() -> None:
    weak = _detection(confidence=0.3)
    strong = _detection(confidence=0.7)
    assert merge_detections([weak, strong]) == [strong]


def test_cache_get_put_and_counters() -> None:
    cache = DetectionCache(capacity=3)
    entry = (_detection(),)

    assert cache.get(("a", 1)) is None
    cache.put(("a", 1), entry)
    assert cache.get(("a", 1)) is entry
    assert ("a", 1) in cache
    info = cache.info()
    assert (info.size, info.capacity, info.hits, info.misses) == (1, 3, 1, 1)


def test_cache_evicts_oldest_inserted_even_if_recently_read() -> None:
    cache = DetectionCache(capacity=3)
    for name in ("a", "b", "c"):
        cache.put((name, 1), ())

    assert cache.get(("a", 1)) == ()
    cache.put(("d", 1), ())

    assert ("a", 1) not in cache
    assert list(cache.keys()) == [("b", 1), ("c", 1), ("d", 1)]


def test_new_version_does_not_invalidate_old_one() -> None:
    cache = DetectionCache(capacity=10)
    cache.put(("a", 1), ())
    cache.put(("a", 2), ())

    assert ("a", 1) in cache
    assert ("a", 2) in cache
    assert len(cache) == 2


def test_evict_document_and_clear() -> None:
    cache = DetectionCache()
    cache.put(("a", 1), ())
    cache.put(("a", 2), ())
    cache.put(("b", 1), ())

    assert cache.evict_document("a") == 2
    assert list(cache.keys()) == [("b", 1)]
    assert cache.evict_document("missing") == 0
    cache.clear()
    assert len(cache) == 0


def test_cache_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        DetectionCache(capacity=0)
