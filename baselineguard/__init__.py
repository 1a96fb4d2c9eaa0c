"""Detect modern web-platform features in source files and rate their Baseline support."""

from ._version import __version__
from .detector import FeatureDetector
from .lookup import FeatureLookupService, StaticFeatureLookup, default_lookup
from .model import DetectedFeature, FeatureRecord, PatternRule, SyntaxPattern
from .patterns import PatternRegistry

__all__ = [
    "DetectedFeature",
    "FeatureDetector",
    "FeatureLookupService",
    "FeatureRecord",
    "PatternRegistry",
    "PatternRule",
    "StaticFeatureLookup",
    "SyntaxPattern",
    "__version__",
    "default_lookup",
]
