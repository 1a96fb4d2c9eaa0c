"""Feature detector: the single entry point tying registry, matchers and cache together."""

from __future__ import annotations

import logging
import threading

from .cache import CacheInfo, DetectionCache
from .constants import CACHE_CAPACITY, CONFIDENCE_FLOOR, PROGRAM_LANGUAGES
from .heuristics import HeuristicTable
from .lookup import FeatureLookupService
from .merge import merge_detections
from .model import DetectedFeature
from .patterns import PatternRegistry
from .syntax import SyntaxMatcher
from .text_matcher import TextMatcher, text_rules
from .util.text import LineIndex

LOGGER = logging.getLogger(__name__)


class FeatureDetector:
    """Detect web-platform features in a document, memoized per version.

    The registry is validated on construction, so a malformed rule stops the
    detector from being built at all. Every collaborator is injected; tests
    build isolated instances instead of sharing process-wide state.
    """

    def __init__(
        self,
        lookup: FeatureLookupService,
        registry: PatternRegistry | None = None,
        *,
        heuristics: HeuristicTable | None = None,
        capacity: int = CACHE_CAPACITY,
        confidence_floor: float = CONFIDENCE_FLOOR,
    ) -> None:
        self.registry = registry if registry is not None else PatternRegistry.default()
        self.registry.validate()
        self.confidence_floor = confidence_floor
        self._syntax = SyntaxMatcher(lookup)
        self._text = TextMatcher(lookup, heuristics)
        self._cache = DetectionCache(capacity)
        self._lock = threading.Lock()
        self.pipeline_runs = 0

    def detect_features(
        self,
        document_id: str,
        version: int,
        language_id: str,
        text: str,
    ) -> list[DetectedFeature]:
        key = (document_id, version)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return list(cached)
            detections = tuple(self._run_pipeline(document_id, language_id, text))
            self._cache.put(key, detections)
            return list(detections)

    def _run_pipeline(
        self,
        document_id: str,
        language_id: str,
        text: str,
    ) -> list[DetectedFeature]:
        self.pipeline_runs += 1
        rules = self.registry.rules_for(language_id)
        LOGGER.debug(
            "Analyzing %s (%s) with %d applicable rules", document_id, language_id, len(rules)
        )
        if not rules or not text:
            return []

        index = LineIndex(text)
        raw: list[DetectedFeature] = []
        syntax_available = False
        if language_id in PROGRAM_LANGUAGES:
            structural = self._syntax.match(document_id, language_id, index, rules)
            if structural is not None:
                syntax_available = True
                raw.extend(structural)

        scannable = text_rules(rules, language_id, syntax_available=syntax_available)
        raw.extend(self._text.match(document_id, index, scannable))

        merged = merge_detections(raw, floor=self.confidence_floor)
        LOGGER.debug("%s: %d raw detections, %d kept", document_id, len(raw), len(merged))
        return merged

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def evict_document(self, document_id: str) -> None:
        with self._lock:
            self._cache.evict_document(document_id)

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return self._cache.info()
