"""Line-local confidence heuristics for ambiguous text patterns.

Each validator receives the matched text, the single source line holding the
match and the rule, and returns a confidence. Validators are registered per
feature id; features without one keep the rule's base confidence.

These are single-line checks and can misjudge expressions spanning several
lines.
"""

from __future__ import annotations

from collections.abc import Callable
import re

from .model import PatternRule

ContextValidator = Callable[[str, str, PatternRule], float]

_TERNARY_TOKEN_RE = re.compile(r"\?[^.]")
_CLASS_DECL_RE = re.compile(r"class\s+")


def optional_chaining_confidence(match: str, line: str, rule: PatternRule) -> float:
    """``?.`` present and no ``?`` followed by anything but a member dot."""
    if "?." in line and not _TERNARY_TOKEN_RE.search(line):
        return 0.9
    return 0.3


def private_field_confidence(match: str, line: str, rule: PatternRule) -> float:
    if _CLASS_DECL_RE.search(line) or line.strip().startswith("#"):
        return 0.9
    return 0.4


def top_level_await_confidence(match: str, line: str, rule: PatternRule) -> float:
    if "async" not in line and line.strip().startswith("await"):
        return 0.8
    return 0.3


DEFAULT_VALIDATORS: dict[str, ContextValidator] = {
    "optional-chaining": optional_chaining_confidence,
    "private-class-fields": private_field_confidence,
    "top-level-await": top_level_await_confidence,
}


class HeuristicTable:
    """Feature id to validator mapping consulted for context-required rules."""

    def __init__(self, validators: dict[str, ContextValidator] | None = None) -> None:
        self._validators = dict(DEFAULT_VALIDATORS if validators is None else validators)

    def register(self, feature_id: str, validator: ContextValidator) -> None:
        self._validators[feature_id] = validator

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._validators

    def confidence(self, match: str, line: str, rule: PatternRule) -> float:
        validator = self._validators.get(rule.feature_id)
        if validator is None:
            return rule.base_confidence
        return validator(match, line, rule)
