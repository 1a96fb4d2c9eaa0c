"""Exception types for pybaselineguard."""

from __future__ import annotations


class BaselineGuardError(Exception):
    """Base exception for expected application errors."""


class MalformedPatternRuleError(BaselineGuardError):
    """Raised when the pattern registry contains an invalid rule."""

    def __init__(self, rule_id: str, reason: str) -> None:
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Malformed pattern rule {rule_id!r}: {reason}")


class SyntaxParseError(BaselineGuardError):
    """Raised when source text cannot be parsed into a usable syntax tree."""

    def __init__(self, language_id: str, reason: str) -> None:
        self.language_id = language_id
        super().__init__(f"Unable to parse {language_id} source ({reason})")


class UnsupportedLanguageError(BaselineGuardError):
    """Raised when no grammar is available for a language."""

    def __init__(self, language_id: str) -> None:
        self.language_id = language_id
        super().__init__(f"No syntax grammar available for language {language_id!r}")


class DatasetError(BaselineGuardError):
    """Raised when a feature dataset cannot be read or is invalid."""

    def __init__(self, path: str, *, cause: str | None = None) -> None:
        detail = f"Unable to load feature dataset from {path}"
        if cause:
            detail = f"{detail} ({cause})"
        super().__init__(detail)
