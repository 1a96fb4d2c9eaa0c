"""Syntax matcher: structural feature detection over tree-sitter parse trees.

Only program-like languages (JavaScript, TypeScript and their JSX variants)
are parsed. Each rule's ``SyntaxPattern.kind`` selects exactly one matcher
function from ``_NODE_MATCHERS``; adding a shape means adding a kind and a
function, never another branch in the traversal.

Trees are error tolerant: ``ERROR`` and ``MISSING`` subtrees are skipped and
the rest of the document is still matched. Only a parser exception or a root
that is itself an ``ERROR`` node counts as a parse failure; the matcher then
returns ``None`` and the caller falls back to text matching.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import lru_cache
import logging

from tree_sitter import Language, Node, Parser
import tree_sitter_javascript
import tree_sitter_typescript

from .constants import SNIPPET_RADIUS
from .exceptions import SyntaxParseError, UnsupportedLanguageError
from .lookup import FeatureLookupService, severity_hint
from .model import DetectedFeature, PatternRule, SourceRange, SyntaxKind, SyntaxPattern
from .util.text import LineIndex, encode_source

LOGGER = logging.getLogger(__name__)

_GRAMMARS: dict[str, Callable[[], object]] = {
    "javascript": tree_sitter_javascript.language,
    "javascriptreact": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "typescriptreact": tree_sitter_typescript.language_tsx,
}


@lru_cache(maxsize=None)
def _language(language_id: str) -> Language:
    factory = _GRAMMARS.get(language_id)
    if factory is None:
        raise UnsupportedLanguageError(language_id)
    return Language(factory())


def supports_language(language_id: str) -> bool:
    return language_id in _GRAMMARS


def parse_source(text: str, language_id: str) -> Node:
    """Parse ``text`` and return the root node.

    The returned tree may contain error nodes; only an unusable parse raises.
    """
    parser = Parser(_language(language_id))
    try:
        tree = parser.parse(encode_source(text))
    except ValueError as exc:
        raise SyntaxParseError(language_id, str(exc)) from exc
    root = tree.root_node
    if _is_broken(root):
        raise SyntaxParseError(language_id, "document has no recognizable structure")
    return root


def _is_broken(node: Node) -> bool:
    return node.type == "ERROR" or node.is_missing


def _node_text(node: Node | None) -> str | None:
    if node is None or node.text is None:
        return None
    return node.text.decode("utf-8", errors="replace")


def _match_constructor_call(node: Node, pattern: SyntaxPattern) -> bool:
    if node.type != "new_expression":
        return False
    constructor = node.child_by_field_name("constructor")
    if constructor is None or constructor.type != "identifier":
        return False
    return _node_text(constructor) == pattern.receiver_name


def _match_method_call(node: Node, pattern: SyntaxPattern) -> bool:
    if node.type != "call_expression":
        return False
    callee = node.child_by_field_name("function")
    if callee is None or callee.type != "member_expression":
        return False
    if _node_text(callee.child_by_field_name("property")) != pattern.member_name:
        return False
    if pattern.receiver_name is None:
        return True
    receiver = callee.child_by_field_name("object")
    if receiver is None or receiver.type != "identifier":
        return False
    return _node_text(receiver) == pattern.receiver_name


def _match_optional_access(node: Node, pattern: SyntaxPattern) -> bool:
    if node.type != "member_expression":
        return False
    return any(child.type == "optional_chain" for child in node.children)


_NODE_MATCHERS: dict[SyntaxKind, Callable[[Node, SyntaxPattern], bool]] = {
    "ConstructorCall": _match_constructor_call,
    "MethodCall": _match_method_call,
    "OptionalAccess": _match_optional_access,
}


class SyntaxMatcher:
    """Run every structural rule over a single depth-first walk of the tree."""

    def __init__(self, lookup: FeatureLookupService) -> None:
        self._lookup = lookup

    def match(
        self,
        document_id: str,
        language_id: str,
        index: LineIndex,
        rules: Sequence[PatternRule],
    ) -> list[DetectedFeature] | None:
        """Return structural detections, or ``None`` when the document won't parse."""
        candidates = [
            (rule, rule.syntax_pattern) for rule in rules if rule.syntax_pattern is not None
        ]
        if not candidates:
            return []

        try:
            root = parse_source(index.text, language_id)
        except (SyntaxParseError, UnsupportedLanguageError) as exc:
            LOGGER.warning("Syntax matching skipped for %s: %s", document_id, exc)
            return None

        detections: list[DetectedFeature] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if _is_broken(node):
                continue
            for rule, pattern in candidates:
                if _NODE_MATCHERS[pattern.kind](node, pattern):
                    detection = self._build(document_id, index, node, rule)
                    if detection is not None:
                        detections.append(detection)
            stack.extend(reversed(node.children))
        return detections

    def _build(
        self,
        document_id: str,
        index: LineIndex,
        node: Node,
        rule: PatternRule,
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

        start = index.char_offset(node.start_byte)
        end = index.char_offset(node.end_byte)
        return DetectedFeature(
            feature_id=rule.feature_id,
            rule_id=rule.rule_id,
            range=SourceRange(start=index.position_at(start), end=index.position_at(end)),
            confidence=rule.base_confidence,
            severity_hint=severity_hint(record.baseline_status),
            baseline_status=record.baseline_status,
            context_snippet=index.char_window(start, end, SNIPPET_RADIUS),
            detection_method="syntax",
        )
