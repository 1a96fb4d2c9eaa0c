"""Deduplication and confidence filtering of raw detections."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from .constants import CONFIDENCE_FLOOR
from .model import DetectedFeature

LOGGER = logging.getLogger(__name__)


def merge_key(detection: DetectedFeature) -> tuple[str, int]:
    """Detections of one feature on one line collapse; columns are ignored."""
    return detection.feature_id, detection.range.start.line


def merge_detections(
    detections: Iterable[DetectedFeature],
    *,
    floor: float = CONFIDENCE_FLOOR,
) -> list[DetectedFeature]:
    """Keep the most confident detection per key, then drop those below ``floor``.

    Ties keep the earliest detection; output follows first-seen key order.
    """
    seen: dict[tuple[str, int], DetectedFeature] = {}
    total = 0
    for detection in detections:
        total += 1
        key = merge_key(detection)
        current = seen.get(key)
        if current is None or detection.confidence > current.confidence:
            seen[key] = detection

    merged = [detection for detection in seen.values() if detection.confidence >= floor]
    if total != len(merged):
        LOGGER.debug("Filtered %d duplicate/low-confidence detections", total - len(merged))
    return merged
