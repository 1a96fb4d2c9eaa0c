"""Pattern registry: the static table of feature-detection rules."""

from __future__ import annotations

from collections.abc import Iterable
import logging
import re
from typing import Final, get_args

from .constants import SCRIPT_LANGUAGES, STYLESHEET_LANGUAGES
from .exceptions import MalformedPatternRuleError
from .model import Category, PatternRule, SyntaxKind, SyntaxPattern

LOGGER = logging.getLogger(__name__)

_STYLES: Final[frozenset[str]] = frozenset(STYLESHEET_LANGUAGES)
_STYLES_NO_STYLUS: Final[frozenset[str]] = frozenset(("css", "scss", "less"))
_SCRIPTS: Final[frozenset[str]] = frozenset(SCRIPT_LANGUAGES)
_EMBEDDED_SCRIPTS: Final[frozenset[str]] = _SCRIPTS | {"vue", "svelte"}
_JSX_MARKUP: Final[frozenset[str]] = frozenset(
    ("html", "javascriptreact", "typescriptreact", "vue", "svelte")
)
_JSX_MARKUP_NO_SVELTE: Final[frozenset[str]] = _JSX_MARKUP - {"svelte"}

_VALID_CATEGORIES: Final[frozenset[str]] = frozenset(get_args(Category))
_VALID_KINDS: Final[frozenset[str]] = frozenset(get_args(SyntaxKind))


def _constructor(name: str) -> SyntaxPattern:
    return SyntaxPattern(kind="ConstructorCall", receiver_name=name)


BUILTIN_RULES: Final[tuple[PatternRule, ...]] = (
    # Stylesheets
    PatternRule(
        rule_id="css.container-queries",
        feature_id="container-queries",
        languages=_STYLES,
        base_confidence=0.95,
        category="stylesheet",
        description="CSS Container Queries",
        text_pattern=r"@container\s*[^{]*\{",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.content-visibility",
        feature_id="content-visibility",
        languages=_STYLES,
        base_confidence=1.0,
        category="stylesheet",
        description="CSS content-visibility property",
        text_pattern=r"content-visibility\s*:",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.cascade-layers",
        feature_id="cascade-layers",
        languages=_STYLES_NO_STYLUS,
        base_confidence=0.95,
        category="stylesheet",
        description="CSS Cascade Layers",
        text_pattern=r"@layer\s+",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.has",
        feature_id="has",
        languages=_STYLES,
        base_confidence=0.9,
        category="stylesheet",
        description="CSS :has() pseudo-class",
        text_pattern=r":has\s*\(",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.grid",
        feature_id="grid",
        languages=_STYLES,
        base_confidence=0.85,
        category="stylesheet",
        description="CSS Grid Layout",
        text_pattern=r"display\s*:\s*grid|grid-template-columns|grid-template-rows|grid-area",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.flexbox",
        feature_id="flexbox",
        languages=_STYLES,
        base_confidence=0.8,
        category="stylesheet",
        description="CSS Flexbox",
        text_pattern=r"display\s*:\s*flex|flex-direction|flex-wrap|justify-content",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.subgrid",
        feature_id="subgrid",
        languages=_STYLES_NO_STYLUS,
        base_confidence=0.95,
        category="stylesheet",
        description="CSS Subgrid",
        text_pattern=r"grid-template-(columns|rows)\s*:\s*subgrid",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.backdrop-filter",
        feature_id="backdrop-filter",
        languages=_STYLES,
        base_confidence=0.95,
        category="stylesheet",
        description="CSS backdrop-filter",
        text_pattern=r"backdrop-filter\s*:",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.aspect-ratio",
        feature_id="aspect-ratio",
        languages=_STYLES,
        base_confidence=1.0,
        category="stylesheet",
        description="CSS aspect-ratio",
        text_pattern=r"aspect-ratio\s*:",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="css.nesting",
        feature_id="nesting",
        languages=_STYLES_NO_STYLUS,
        base_confidence=0.7,
        category="stylesheet",
        description="CSS Nesting",
        text_pattern=r"&\s*\{|&\s+\.",
        ignore_case=True,
    ),
    # Web APIs
    PatternRule(
        rule_id="api.urlpattern",
        feature_id="urlpattern",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="URLPattern API",
        text_pattern=r"new\s+URLPattern\s*\(",
        syntax_pattern=_constructor("URLPattern"),
    ),
    PatternRule(
        rule_id="api.async-clipboard",
        feature_id="async-clipboard",
        languages=_SCRIPTS,
        base_confidence=0.95,
        category="api",
        description="Async Clipboard API",
        text_pattern=r"navigator\.clipboard\.(writeText|readText|write|read)",
    ),
    PatternRule(
        rule_id="api.abortcontroller",
        feature_id="aborting",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="AbortController",
        text_pattern=r"new\s+AbortController\s*\(",
        syntax_pattern=_constructor("AbortController"),
    ),
    PatternRule(
        rule_id="api.abortsignal-static",
        feature_id="abortsignal-any",
        languages=_SCRIPTS,
        base_confidence=0.95,
        category="api",
        description="AbortSignal static methods",
        text_pattern=r"AbortSignal\.(abort|timeout|any)",
    ),
    PatternRule(
        rule_id="api.intersectionobserver",
        feature_id="intersection-observer",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="Intersection Observer API",
        text_pattern=r"new\s+IntersectionObserver\s*\(",
        syntax_pattern=_constructor("IntersectionObserver"),
    ),
    PatternRule(
        rule_id="api.resizeobserver",
        feature_id="resize-observer",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="Resize Observer API",
        text_pattern=r"new\s+ResizeObserver\s*\(",
        syntax_pattern=_constructor("ResizeObserver"),
    ),
    PatternRule(
        rule_id="api.mutationobserver",
        feature_id="mutationobserver",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="Mutation Observer API",
        text_pattern=r"new\s+MutationObserver\s*\(",
        syntax_pattern=_constructor("MutationObserver"),
    ),
    PatternRule(
        rule_id="api.web-share",
        feature_id="web-share",
        languages=_SCRIPTS,
        base_confidence=0.95,
        category="api",
        description="Web Share API",
        text_pattern=r"navigator\.share\s*\(",
        syntax_pattern=SyntaxPattern(
            kind="MethodCall", receiver_name="navigator", member_name="share"
        ),
    ),
    PatternRule(
        rule_id="api.view-transitions",
        feature_id="view-transitions",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="View Transitions API",
        text_pattern=r"document\.startViewTransition\s*\(",
        syntax_pattern=SyntaxPattern(
            kind="MethodCall", receiver_name="document", member_name="startViewTransition"
        ),
    ),
    PatternRule(
        rule_id="api.broadcastchannel",
        feature_id="broadcast-channel",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="Broadcast Channel API",
        text_pattern=r"new\s+BroadcastChannel\s*\(",
        syntax_pattern=_constructor("BroadcastChannel"),
    ),
    PatternRule(
        rule_id="api.serviceworker",
        feature_id="service-workers",
        languages=_SCRIPTS,
        base_confidence=0.95,
        category="api",
        description="Service Worker API",
        text_pattern=r"navigator\.serviceWorker",
    ),
    PatternRule(
        rule_id="api.web-animations",
        feature_id="web-animations",
        languages=_SCRIPTS,
        base_confidence=0.7,
        category="api",
        description="Web Animations API",
        text_pattern=r"\.animate\s*\(",
        context_required=True,
    ),
    PatternRule(
        rule_id="api.fetch",
        feature_id="fetch",
        languages=_SCRIPTS,
        base_confidence=0.9,
        category="api",
        description="Fetch API",
        text_pattern=r"\bfetch\s*\(",
    ),
    PatternRule(
        rule_id="api.payment-request",
        feature_id="payment-request",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="Payment Request API",
        text_pattern=r"new\s+PaymentRequest\s*\(",
        syntax_pattern=_constructor("PaymentRequest"),
    ),
    PatternRule(
        rule_id="api.notification",
        feature_id="notifications",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="Notifications API",
        text_pattern=r"new\s+Notification\s*\(",
        syntax_pattern=_constructor("Notification"),
    ),
    PatternRule(
        rule_id="api.geolocation",
        feature_id="geolocation",
        languages=_SCRIPTS,
        base_confidence=0.95,
        category="api",
        description="Geolocation API",
        text_pattern=r"navigator\.geolocation",
    ),
    PatternRule(
        rule_id="api.indexeddb",
        feature_id="indexeddb",
        languages=_SCRIPTS,
        base_confidence=0.9,
        category="api",
        description="IndexedDB",
        text_pattern=r"indexedDB\.open|IDBDatabase",
    ),
    PatternRule(
        rule_id="api.websockets",
        feature_id="websockets",
        languages=_SCRIPTS,
        base_confidence=1.0,
        category="api",
        description="WebSocket API",
        text_pattern=r"new\s+WebSocket\s*\(",
        syntax_pattern=_constructor("WebSocket"),
    ),
    PatternRule(
        rule_id="api.pointer-events",
        feature_id="pointer-events",
        languages=_SCRIPTS | {"html"},
        base_confidence=0.85,
        category="api",
        description="Pointer Events",
        text_pattern=r"onpointer(down|up|move|cancel|over|out|enter|leave)",
        ignore_case=True,
    ),
    # Script syntax
    PatternRule(
        rule_id="js.optional-chaining",
        feature_id="optional-chaining",
        languages=_EMBEDDED_SCRIPTS,
        base_confidence=0.9,
        category="script",
        description="Optional chaining operator (?.)",
        text_pattern=r"\?\.",
        syntax_pattern=SyntaxPattern(kind="OptionalAccess"),
        context_required=True,
    ),
    PatternRule(
        rule_id="js.private-class-fields",
        feature_id="private-class-fields",
        languages=_EMBEDDED_SCRIPTS,
        base_confidence=0.9,
        category="script",
        description="Private class fields (#field)",
        text_pattern=r"#[A-Za-z_$][\w$]*",
        context_required=True,
    ),
    PatternRule(
        rule_id="js.top-level-await",
        feature_id="top-level-await",
        languages=_EMBEDDED_SCRIPTS,
        base_confidence=0.8,
        category="script",
        description="Top-level await in modules",
        text_pattern=r"(?m)^[ \t]*await\b",
        context_required=True,
    ),
    # Markup
    PatternRule(
        rule_id="html.dialog",
        feature_id="dialog",
        languages=_JSX_MARKUP,
        base_confidence=0.95,
        category="markup",
        description="HTML <dialog> element",
        text_pattern=r"<dialog[>\s]",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="html.details",
        feature_id="details",
        languages=_JSX_MARKUP,
        base_confidence=0.95,
        category="markup",
        description="HTML <details> element",
        text_pattern=r"<details[>\s]",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="html.picture",
        feature_id="picture",
        languages=_JSX_MARKUP,
        base_confidence=0.95,
        category="markup",
        description="HTML <picture> element",
        text_pattern=r"<picture[>\s]",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="html.loading-lazy",
        feature_id="loading-lazy",
        languages=_JSX_MARKUP_NO_SVELTE,
        base_confidence=0.9,
        category="markup",
        description="HTML loading=lazy attribute",
        text_pattern=r"loading\s*=\s*[\"']lazy[\"']",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="html.template",
        feature_id="template",
        languages=_JSX_MARKUP_NO_SVELTE,
        base_confidence=0.95,
        category="markup",
        description="HTML <template> element",
        text_pattern=r"<template[>\s]",
        ignore_case=True,
    ),
    PatternRule(
        rule_id="html.slot",
        feature_id="slot",
        languages=_JSX_MARKUP_NO_SVELTE,
        base_confidence=0.95,
        category="markup",
        description="HTML <slot> element",
        text_pattern=r"<slot[>\s]",
        ignore_case=True,
    ),
)

def compile_text_pattern(rule: PatternRule) -> re.Pattern[str]:
    """Compile a rule's text pattern (``re`` keeps its own compile cache)."""
    if rule.text_pattern is None:
        raise MalformedPatternRuleError(rule.rule_id, "rule has no text pattern")
    return re.compile(rule.text_pattern, re.IGNORECASE if rule.ignore_case else 0)


def _validate_syntax_pattern(rule: PatternRule, pattern: SyntaxPattern) -> None:
    if pattern.kind not in _VALID_KINDS:
        raise MalformedPatternRuleError(rule.rule_id, f"unknown syntax kind {pattern.kind!r}")
    if pattern.kind == "ConstructorCall" and not pattern.receiver_name:
        raise MalformedPatternRuleError(rule.rule_id, "ConstructorCall requires receiver_name")
    if pattern.kind == "MethodCall" and not pattern.member_name:
        raise MalformedPatternRuleError(rule.rule_id, "MethodCall requires member_name")


def validate_rule(rule: PatternRule) -> None:
    """Raise ``MalformedPatternRuleError`` when a rule cannot be used safely."""
    if not rule.rule_id:
        raise MalformedPatternRuleError("<unnamed>", "rule_id is empty")
    if not rule.feature_id:
        raise MalformedPatternRuleError(rule.rule_id, "feature_id is empty")
    if not rule.languages:
        raise MalformedPatternRuleError(rule.rule_id, "no applicable languages")
    if not 0.0 <= rule.base_confidence <= 1.0:
        raise MalformedPatternRuleError(
            rule.rule_id, f"base_confidence {rule.base_confidence} outside [0, 1]"
        )
    if rule.category not in _VALID_CATEGORIES:
        raise MalformedPatternRuleError(rule.rule_id, f"unknown category {rule.category!r}")
    if rule.text_pattern is None and rule.syntax_pattern is None:
        raise MalformedPatternRuleError(rule.rule_id, "rule has neither text nor syntax pattern")

    if rule.text_pattern is not None:
        if not rule.text_pattern:
            raise MalformedPatternRuleError(rule.rule_id, "text pattern is empty")
        try:
            compile_text_pattern(rule)
        except re.error as exc:
            raise MalformedPatternRuleError(rule.rule_id, f"invalid regex: {exc}") from exc

    if rule.syntax_pattern is not None:
        _validate_syntax_pattern(rule, rule.syntax_pattern)


class PatternRegistry:
    """Read-only table of detection rules shared by every analysis."""

    def __init__(self, rules: Iterable[PatternRule]) -> None:
        self._rules: tuple[PatternRule, ...] = tuple(rules)
        self._validated = False

    @classmethod
    def default(cls) -> PatternRegistry:
        return cls(BUILTIN_RULES)

    @property
    def validated(self) -> bool:
        return self._validated

    def validate(self) -> None:
        """Check every rule once; any defect is fatal for the whole registry."""
        if self._validated:
            return
        seen: set[str] = set()
        for rule in self._rules:
            validate_rule(rule)
            if rule.rule_id in seen:
                raise MalformedPatternRuleError(rule.rule_id, "duplicate rule_id")
            seen.add(rule.rule_id)
        self._validated = True
        LOGGER.debug("Validated %d pattern rules", len(self._rules))

    def rules_for(self, language_id: str) -> list[PatternRule]:
        return [rule for rule in self._rules if language_id in rule.languages]

    def rules_for_feature(self, feature_id: str) -> list[PatternRule]:
        """Every rule detecting ``feature_id``; several rules may share one feature."""
        return [rule for rule in self._rules if rule.feature_id == feature_id]

    def rule_for_feature(self, feature_id: str) -> PatternRule | None:
        """First rule, in registry order, detecting ``feature_id``."""
        for rule in self._rules:
            if rule.feature_id == feature_id:
                return rule
        return None

    def rules_by_category(self, category: str) -> list[PatternRule]:
        return [rule for rule in self._rules if rule.category == category]

    def all_rules(self) -> tuple[PatternRule, ...]:
        return self._rules

    def languages(self) -> frozenset[str]:
        return frozenset(lang for rule in self._rules for lang in rule.languages)

    def __len__(self) -> int:
        return len(self._rules)
