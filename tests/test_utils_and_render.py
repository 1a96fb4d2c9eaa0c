from __future__ import annotations

from rich.console import Console

from baselineguard.advice import describe
from baselineguard.lookup import default_lookup
from baselineguard.model import DetectedFeature, Position, SourceRange
from baselineguard.render_basic import render_detections
from baselineguard.util import text as text_utils
from baselineguard.util.text import LineIndex


def _print(renderable: object) -> str:
    console = Console(record=True, width=120, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_text_utils_branches() -> None:
    assert text_utils.normalize_whitespace(" a\n  b ") == "a b"
    assert text_utils.ellipsize("abc", 0) == ""
    assert text_utils.ellipsize("abc", 1) == "…"
    assert text_utils.ellipsize("abc", 10) == "abc"
    assert text_utils.ellipsize("abcdef", 4) == "abc…"


def test_line_index_positions() -> None:
    index = LineIndex("ab\r\ncd\n\nef")

    assert index.line_count == 4
    assert index.position_at(0) == Position(0, 0)
    assert index.position_at(4) == Position(1, 0)
    assert index.position_at(7) == Position(2, 0)
    assert index.position_at(10) == Position(3, 2)
    assert index.position_at(99) == Position(3, 2)
    assert index.line_text(0) == "ab"
    assert index.line_text(2) == ""
    assert index.line_window(3, 1) == "\nef\n"
    assert index.char_window(4, 6, 2) == "\r\ncd\n\n"


def test_char_offset_handles_multibyte_text() -> None:
    ascii_index = LineIndex("let a = 1;")
    assert ascii_index.char_offset(4) == 4

    index = LineIndex("é\nnew X()")
    assert index.char_offset(3) == 2
    assert index.position_at(index.char_offset(3)) == Position(1, 0)


def test_char_offset_counts_only_the_containing_line() -> None:
    index = LineIndex("é\nñ = 1\nx")
    assert index.char_offset(5) == 3
    assert index.char_offset(10) == 8
    assert index.char_offset(999) == len(index.text)

    surrogate = LineIndex("'\ud800'\nz")
    assert text_utils.encode_source(surrogate.text) == b"'\xed\xa0\x80'\nz"
    assert surrogate.char_offset(6) == 4


def test_render_detections() -> None:
    lookup = default_lookup()
    detection = DetectedFeature(
        feature_id="backdrop-filter",
        rule_id="css.backdrop-filter",
        range=SourceRange(Position(0, 8), Position(0, 24)),
        confidence=0.95,
        severity_hint="information",
        baseline_status="newly",
        context_snippet=".card {\n  backdrop-filter: blur(4px);\n}\n",
        detection_method="text",
    )

    output = _print(render_detections("a.css", "css", [detection], lookup))

    assert "a.css [css]" in output
    assert "1:9" in output
    assert "backdrop-filter: Newly available (Baseline since 2024-09-16)" in output
    assert "Browser support: 7/7 browsers supported" in output
    assert "text, confidence 0.95" in output
    assert "Not supported" not in output
    assert "Add fallback CSS using @supports" in output
    assert ".card { backdrop-filter: blur(4px); }" in output


def test_render_without_detections() -> None:
    output = _print(render_detections("a.html", "html", [], default_lookup()))
    assert "No web-platform features detected." in output


def test_render_uses_diagnostic_text_and_lists_missing_browsers() -> None:
    lookup = default_lookup()
    detection = DetectedFeature(
        feature_id="web-share",
        rule_id="api.web-share",
        range=SourceRange(Position(3, 2), Position(3, 20)),
        confidence=1.0,
        severity_hint="warning",
        baseline_status="limited",
        context_snippet="navigator.share(data);\n",
        detection_method="syntax",
    )
    record = lookup.get_feature("web-share")
    assert record is not None

    output = _print(render_detections("share.js", "javascript", [detection], lookup))

    _, *details = describe(detection, record, "javascript").splitlines()
    for line in details:
        assert line in output
    assert "4:3" in output
    assert "Web share: Limited availability" in output
    assert "Not supported: Firefox, Firefox Android" in output


def test_render_without_lookup_record() -> None:
    detection = DetectedFeature(
        feature_id="mystery",
        rule_id="t.mystery",
        range=SourceRange(Position(0, 0), Position(0, 4)),
        confidence=0.9,
        severity_hint="information",
        baseline_status="unknown",
        context_snippet="x\n",
        detection_method="text",
    )
    output = _print(render_detections("a.css", "css", [detection], default_lookup()))
    assert "1:1" in output
    assert "mystery: Unknown availability" in output
