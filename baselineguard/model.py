"""Data models for pattern rules, feature records and detections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

SyntaxKind = Literal["ConstructorCall", "MethodCall", "OptionalAccess"]
Category = Literal["markup", "stylesheet", "script", "api"]
BaselineStatus = Literal["widely", "newly", "limited", "unknown"]
SeverityHint = Literal["warning", "information", "hint"]
DetectionMethod = Literal["syntax", "text"]


@dataclass(frozen=True)
class SyntaxPattern:
    kind: SyntaxKind
    receiver_name: str | None = None
    member_name: str | None = None


@dataclass(frozen=True)
class PatternRule:
    """A single feature-detection rule.

    Several rules may target the same ``feature_id`` through different shapes;
    ``rule_id`` is what identifies a rule inside the registry.
    """

    rule_id: str
    feature_id: str
    languages: frozenset[str]
    base_confidence: float
    category: Category
    description: str = ""
    text_pattern: str | None = None
    ignore_case: bool = False
    syntax_pattern: SyntaxPattern | None = None
    context_required: bool = False


@dataclass(frozen=True)
class BrowserImplementation:
    browser: str
    status: Literal["available", "unavailable"]
    version: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class FeatureRecord:
    feature_id: str
    name: str
    baseline_status: BaselineStatus = "unknown"
    baseline_low_date: str | None = None
    browser_implementations: tuple[BrowserImplementation, ...] = ()
    usage: dict[str, float] = field(default_factory=dict)
    spec_links: tuple[str, ...] = ()


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line and character column."""

    line: int
    column: int


@dataclass(frozen=True)
class SourceRange:
    start: Position
    end: Position


@dataclass(frozen=True)
class DetectedFeature:
    feature_id: str
    rule_id: str
    range: SourceRange
    confidence: float
    severity_hint: SeverityHint
    baseline_status: BaselineStatus
    context_snippet: str
    detection_method: DetectionMethod

    @property
    def line(self) -> int:
        return self.range.start.line

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature_id": self.feature_id,
            "rule_id": self.rule_id,
            "range": {
                "start": {"line": self.range.start.line, "column": self.range.start.column},
                "end": {"line": self.range.end.line, "column": self.range.end.column},
            },
            "confidence": self.confidence,
            "severity_hint": self.severity_hint,
            "baseline_status": self.baseline_status,
            "context_snippet": self.context_snippet,
            "detection_method": self.detection_method,
        }
