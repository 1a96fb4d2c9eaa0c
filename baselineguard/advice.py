"""Human-readable support summaries and fallback guidance for detections."""

from __future__ import annotations

from .constants import (
    BROWSER_NAMES,
    MARKUP_LANGUAGES,
    SCRIPT_LANGUAGES,
    STATUS_ICON_MAP,
    STATUS_LABEL_MAP,
    STYLESHEET_LANGUAGES,
)
from .model import BaselineStatus, DetectedFeature, FeatureRecord


def status_label(record: FeatureRecord) -> str:
    label = STATUS_LABEL_MAP.get(record.baseline_status, STATUS_LABEL_MAP["unknown"])
    if record.baseline_status in ("widely", "newly"):
        return f"{label} (Baseline since {record.baseline_low_date or 'N/A'})"
    return label


def browser_support_summary(record: FeatureRecord) -> str:
    total = len(record.browser_implementations)
    supported = sum(1 for impl in record.browser_implementations if impl.status == "available")
    return f"{supported}/{total} browsers supported"


def supported_browsers(record: FeatureRecord) -> tuple[list[str], list[str]]:
    """Split browsers into (supported with version, unsupported) display names."""
    supported: list[str] = []
    unsupported: list[str] = []
    for impl in record.browser_implementations:
        name = BROWSER_NAMES.get(impl.browser, impl.browser)
        if impl.status == "available":
            supported.append(f"{name} {impl.version}+" if impl.version else name)
        else:
            unsupported.append(name)
    return supported, unsupported


def fallback_guidance(language_id: str, status: BaselineStatus) -> str | None:
    if status not in ("newly", "limited"):
        return None
    if language_id in STYLESHEET_LANGUAGES:
        return "Add fallback CSS using @supports"
    if language_id in SCRIPT_LANGUAGES:
        return "Use feature detection or a polyfill"
    if language_id in MARKUP_LANGUAGES:
        return "Provide fallback content"
    return None


def describe(detection: DetectedFeature, record: FeatureRecord, language_id: str) -> str:
    """One-paragraph message for a detection, as a diagnostic would show it."""
    icon = STATUS_ICON_MAP.get(record.baseline_status, STATUS_ICON_MAP["unknown"])
    message = f"{icon} {record.name}: {status_label(record)}"
    message += f"\nBrowser support: {browser_support_summary(record)}"
    if detection.confidence < 0.8:
        message += f" ({round(detection.confidence * 100)}% confidence)"
    guidance = fallback_guidance(language_id, record.baseline_status)
    if guidance:
        message += f"\n{guidance}"
    return message
