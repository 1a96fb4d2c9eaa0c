"""Bounded detection cache keyed by (document identity, version)."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterator
from dataclasses import dataclass

from .constants import CACHE_CAPACITY
from .model import DetectedFeature

CacheKey = tuple[str, int]


@dataclass(frozen=True)
class CacheInfo:
    size: int
    capacity: int
    hits: int
    misses: int


class DetectionCache:
    """Insertion-ordered map that evicts the oldest *inserted* entry.

    Reads never refresh an entry's position, so a document that is read
    constantly still ages out once ``capacity`` newer entries arrive. Older
    versions of a document are not purged when a new version is stored; they
    are reclaimed by the same capacity bound.

    Not thread-safe on its own; ``FeatureDetector`` serializes access.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[CacheKey, tuple[DetectedFeature, ...]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: CacheKey) -> tuple[DetectedFeature, ...] | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def put(self, key: CacheKey, detections: tuple[DetectedFeature, ...]) -> None:
        self._entries[key] = detections
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def evict_document(self, document_id: str) -> int:
        """Drop every cached version of ``document_id``; return how many went."""
        stale = [key for key in self._entries if key[0] == document_id]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def info(self) -> CacheInfo:
        return CacheInfo(
            size=len(self._entries),
            capacity=self.capacity,
            hits=self.hits,
            misses=self.misses,
        )

    def keys(self) -> Iterator[CacheKey]:
        return iter(list(self._entries))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
