from __future__ import annotations

import pytest

from baselineguard.exceptions import MalformedPatternRuleError
from baselineguard.model import PatternRule, SyntaxPattern
from baselineguard.patterns import BUILTIN_RULES, PatternRegistry, validate_rule


def _rule(**overrides: object) -> PatternRule:
    fields: dict[str, object] = {
        "rule_id": "t.rule",
        "feature_id": "thing",
        "languages": frozenset({"css"}),
        "base_confidence": 0.9,
        "category": "stylesheet",
        "text_pattern": r"thing\s*:",
    }
    fields.update(overrides)
    return PatternRule(**fields)  # type: ignore[arg-type]


def test_builtin_registry_validates() -> None:
    registry = PatternRegistry.default()
    registry.validate()
    assert registry.validated
    assert len(registry) == len(BUILTIN_RULES)


def test_rules_for_filters_by_language_and_keeps_order() -> None:
    registry = PatternRegistry.default()
    css_rules = registry.rules_for("css")
    assert css_rules
    assert all("css" in rule.languages for rule in css_rules)
    assert [rule.rule_id for rule in css_rules] == [
        rule.rule_id for rule in BUILTIN_RULES if "css" in rule.languages
    ]
    assert registry.rules_for("cobol") == []


def test_lookup_helpers() -> None:
    registry = PatternRegistry.default()
    urlpattern = registry.rule_for_feature("urlpattern")
    assert urlpattern is not None
    assert urlpattern.syntax_pattern == SyntaxPattern(
        kind="ConstructorCall", receiver_name="URLPattern"
    )
    assert registry.rule_for_feature("missing") is None
    assert registry.rules_for_feature("urlpattern") == [urlpattern]
    assert registry.rules_for_feature("missing") == []
    assert {rule.category for rule in registry.rules_by_category("markup")} == {"markup"}
    assert {"css", "html", "javascript", "vue"} <= registry.languages()
    assert registry.all_rules() == BUILTIN_RULES


def test_every_structural_rule_targets_scripts() -> None:
    for rule in BUILTIN_RULES:
        if rule.syntax_pattern is not None:
            assert "javascript" in rule.languages


@pytest.mark.parametrize(
    ("overrides", "reason"),
    [
        ({"text_pattern": ""}, "empty"),
        ({"text_pattern": "(unclosed"}, "invalid regex"),
        ({"text_pattern": None}, "neither"),
        ({"base_confidence": 1.5}, "outside"),
        ({"languages": frozenset()}, "languages"),
        ({"category": "python"}, "category"),
        ({"feature_id": ""}, "feature_id"),
        ({"syntax_pattern": SyntaxPattern(kind="ConstructorCall")}, "receiver_name"),
        ({"syntax_pattern": SyntaxPattern(kind="MethodCall")}, "member_name"),
        ({"syntax_pattern": SyntaxPattern(kind="Decorator")}, "unknown syntax kind"),  # type: ignore[arg-type]
    ],
)
def test_validate_rule_rejects_malformed(overrides: dict[str, object], reason: str) -> None:
    with pytest.raises(MalformedPatternRuleError) as excinfo:
        validate_rule(_rule(**overrides))
    assert reason in str(excinfo.value)
    assert excinfo.value.rule_id == "t.rule"


def test_method_call_without_receiver_is_valid() -> None:
    validate_rule(_rule(syntax_pattern=SyntaxPattern(kind="MethodCall", member_name="animate")))


def test_registry_validation_is_fatal_for_whole_registry() -> None:
    registry = PatternRegistry([_rule(), _rule(rule_id="t.bad", text_pattern="[")])
    with pytest.raises(MalformedPatternRuleError, match="t.bad"):
        registry.validate()
    assert not registry.validated


def test_duplicate_rule_ids_rejected() -> None:
    registry = PatternRegistry([_rule(), _rule(feature_id="other")])
    with pytest.raises(MalformedPatternRuleError, match="duplicate"):
        registry.validate()


def test_rules_sharing_a_feature_id() -> None:
    first = _rule(rule_id="t.one")
    second = _rule(rule_id="t.two", text_pattern=r"thing-two\s*:")
    registry = PatternRegistry([first, second])

    assert registry.rules_for_feature("thing") == [first, second]
    assert registry.rule_for_feature("thing") == first
