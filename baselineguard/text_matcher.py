"""Text matcher: regex scanning over raw document text."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import logging
import re

from .constants import CONTEXT_DISCARD_THRESHOLD, CONTEXT_LINES, PROGRAM_LANGUAGES
from .heuristics import HeuristicTable
from .lookup import FeatureLookupService, severity_hint
from .model import DetectedFeature, PatternRule, SourceRange
from .patterns import compile_text_pattern
from .util.text import LineIndex

LOGGER = logging.getLogger(__name__)


def iter_matches(pattern: re.Pattern[str], text: str) -> Iterator[re.Match[str]]:
    """Yield successive matches, stepping past zero-length ones.

    The cursor always starts at 0, and every iteration advances it by at least
    one character, so at most ``len(text) + 1`` matches are produced.
    """
    pos = 0
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            return
        yield match
        pos = match.end() if match.end() > match.start() else match.end() + 1


def text_rules(
    rules: Sequence[PatternRule],
    language_id: str,
    *,
    syntax_available: bool,
) -> list[PatternRule]:
    """Select the rules the text matcher owns for one document."""
    structural_owned = syntax_available and language_id in PROGRAM_LANGUAGES
    return [
        rule
        for rule in rules
        if rule.text_pattern is not None
        and not (structural_owned and rule.syntax_pattern is not None)
    ]


class TextMatcher:
    def __init__(
        self,
        lookup: FeatureLookupService,
        heuristics: HeuristicTable | None = None,
    ) -> None:
        self._lookup = lookup
        self._heuristics = heuristics if heuristics is not None else HeuristicTable()

    def match(
        self,
        document_id: str,
        index: LineIndex,
        rules: Sequence[PatternRule],
    ) -> list[DetectedFeature]:
        detections: list[DetectedFeature] = []
        for rule in rules:
            pattern = compile_text_pattern(rule)
            for match in iter_matches(pattern, index.text):
                if match.end() == match.start():
                    continue
                detection = self._build(document_id, index, rule, match)
                if detection is not None:
                    detections.append(detection)
        return detections

    def _build(
        self,
        document_id: str,
        index: LineIndex,
        rule: PatternRule,
        match: re.Match[str],
    ) -> DetectedFeature | None:
        record = self._lookup.get_feature(rule.feature_id)
        if record is None:
            LOGGER.debug(
                "Feature %s not in lookup service (rule %s, %s)",
                rule.feature_id,
                rule.rule_id,
                document_id,
            )
            return None

        start = index.position_at(match.start())
        confidence = rule.base_confidence
        if rule.context_required:
            confidence = self._heuristics.confidence(
                match.group(0), index.line_text(start.line), rule
            )
            if confidence < CONTEXT_DISCARD_THRESHOLD:
                LOGGER.debug(
                    "Discarded %s at %s:%d (confidence %.2f)",
                    rule.rule_id,
                    document_id,
                    start.line,
                    confidence,
                )
                return None

        return DetectedFeature(
            feature_id=rule.feature_id,
            rule_id=rule.rule_id,
            range=SourceRange(start=start, end=index.position_at(match.end())),
            confidence=min(1.0, max(0.0, confidence)),
            severity_hint=severity_hint(record.baseline_status),
            baseline_status=record.baseline_status,
            context_snippet=index.line_window(start.line, CONTEXT_LINES),
            detection_method="text",
        )
