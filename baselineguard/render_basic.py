"""Plain terminal renderer for scan results."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .advice import describe, supported_browsers
from .constants import STATUS_ICON_MAP, STATUS_LABEL_MAP
from .lookup import FeatureLookupService
from .model import DetectedFeature
from .util.text import ellipsize, normalize_whitespace

_SEVERITY_STYLES = {
    "warning": "bold yellow",
    "information": "cyan",
    "hint": "green",
}
_SNIPPET_WIDTH = 72


def _snippet_line(detection: DetectedFeature) -> str:
    return ellipsize(normalize_whitespace(detection.context_snippet), _SNIPPET_WIDTH)


def render_detections(
    path: str,
    language_id: str,
    detections: list[DetectedFeature],
    lookup: FeatureLookupService,
) -> Group:
    """Render one file's detections as a Rich renderable group."""
    lines: list[Text] = []

    if not detections:
        lines.append(Text("No web-platform features detected.", style="dim"))

    for detection in detections:
        record = lookup.get_feature(detection.feature_id)
        start = detection.range.start
        style = _SEVERITY_STYLES.get(detection.severity_hint, "")
        position = f"{start.line + 1}:{start.column + 1}"

        if record is None:
            icon = STATUS_ICON_MAP.get(detection.baseline_status, STATUS_ICON_MAP["unknown"])
            label = STATUS_LABEL_MAP.get(detection.baseline_status, STATUS_LABEL_MAP["unknown"])
            lines.append(Text(f"{position} {icon} {detection.feature_id}: {label}", style=style))
        else:
            headline, *details = describe(detection, record, language_id).splitlines()
            lines.append(Text(f"{position} {headline}", style=style))
            lines.extend(Text(f"  {detail}") for detail in details)
            _, unsupported = supported_browsers(record)
            if unsupported:
                lines.append(Text(f"  Not supported: {', '.join(unsupported)}"))

        lines.append(
            Text(
                f"  {detection.detection_method}, confidence {detection.confidence:.2f}",
                style="dim",
            )
        )
        lines.append(Text(f"  {_snippet_line(detection)}", style="dim"))

    title = Text(f"{path} [{language_id}]")
    return Group(Panel(Group(*lines), border_style="blue", title=title))
