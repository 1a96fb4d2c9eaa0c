"""Constants used across pybaselineguard."""

from __future__ import annotations

from typing import Final

CACHE_CAPACITY: Final[int] = 10
CONFIDENCE_FLOOR: Final[float] = 0.6
CONTEXT_DISCARD_THRESHOLD: Final[float] = 0.5
SNIPPET_RADIUS: Final[int] = 50
CONTEXT_LINES: Final[int] = 2

DEBUG_ENV_VAR: Final[str] = "BASELINEGUARD_DEBUG"
BUNDLED_DATASET: Final[str] = "features.json"

SCRIPT_LANGUAGES: Final[tuple[str, ...]] = (
    "javascript",
    "typescript",
    "javascriptreact",
    "typescriptreact",
)
STYLESHEET_LANGUAGES: Final[tuple[str, ...]] = ("css", "scss", "less", "stylus")
MARKUP_LANGUAGES: Final[tuple[str, ...]] = ("html", "vue", "svelte")

# Languages the syntax matcher can parse into a tree.
PROGRAM_LANGUAGES: Final[frozenset[str]] = frozenset(SCRIPT_LANGUAGES)

EXTENSION_LANGUAGE_MAP: Final[dict[str, str]] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".styl": "stylus",
    ".html": "html",
    ".htm": "html",
    ".vue": "vue",
    ".svelte": "svelte",
}

SEVERITY_BY_STATUS: Final[dict[str, str]] = {
    "limited": "warning",
    "newly": "information",
    "widely": "hint",
    "unknown": "information",
}

STATUS_ICON_MAP: Final[dict[str, str]] = {
    "widely": "✅",
    "newly": "🟡",
    "limited": "⚠️",
    "unknown": "❓",
}

STATUS_LABEL_MAP: Final[dict[str, str]] = {
    "widely": "Widely available",
    "newly": "Newly available",
    "limited": "Limited availability",
    "unknown": "Unknown availability",
}

BROWSER_NAMES: Final[dict[str, str]] = {
    "chrome": "Chrome",
    "edge": "Edge",
    "firefox": "Firefox",
    "safari": "Safari",
    "chrome_android": "Chrome Android",
    "firefox_android": "Firefox Android",
    "safari_ios": "Safari iOS",
}
