"""Feature lookup service: resolves feature ids to Baseline support records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from importlib import resources
import json
import logging
from pathlib import Path
from typing import Literal, Protocol, cast

from .constants import BUNDLED_DATASET, SEVERITY_BY_STATUS
from .exceptions import DatasetError
from .model import BaselineStatus, BrowserImplementation, FeatureRecord, SeverityHint

LOGGER = logging.getLogger(__name__)

_KNOWN_STATUSES: frozenset[str] = frozenset(("widely", "newly", "limited"))


class FeatureLookupService(Protocol):
    """Read-only, side-effect-free lookup keyed by feature id."""

    def get_feature(self, feature_id: str) -> FeatureRecord | None: ...


class StaticFeatureLookup:
    """In-memory lookup over a fixed set of records."""

    def __init__(self, records: Iterable[FeatureRecord]) -> None:
        self._records: dict[str, FeatureRecord] = {}
        for record in records:
            self._records[record.feature_id] = record

    def get_feature(self, feature_id: str) -> FeatureRecord | None:
        return self._records.get(feature_id)

    def search(self, name: str) -> list[FeatureRecord]:
        """Case-insensitive substring search over feature names and ids."""
        term = name.strip().lower()
        if not term:
            return []
        return [
            record
            for record in self._records.values()
            if term in record.name.lower() or term in record.feature_id.lower()
        ]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._records


def _clean_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _parse_baseline(raw: object) -> tuple[BaselineStatus, str | None]:
    if not isinstance(raw, dict):
        return "unknown", None
    baseline = cast(dict[str, object], raw)
    status = _clean_str(baseline.get("status"))
    low_date = _clean_str(baseline.get("low_date") or baseline.get("lowDate"))
    if status is None or status.lower() not in _KNOWN_STATUSES:
        return "unknown", low_date
    return cast(BaselineStatus, status.lower()), low_date


def _parse_implementations(raw: object) -> tuple[BrowserImplementation, ...]:
    if not isinstance(raw, dict):
        return ()
    output: list[BrowserImplementation] = []
    for browser, value in cast(dict[str, object], raw).items():
        if not isinstance(browser, str) or not isinstance(value, dict):
            continue
        impl = cast(dict[str, object], value)
        status: Literal["available", "unavailable"] = (
            "available" if impl.get("status") == "available" else "unavailable"
        )
        output.append(
            BrowserImplementation(
                browser=browser,
                status=status,
                version=_clean_str(impl.get("version")),
                date=_clean_str(impl.get("date")),
            )
        )
    return tuple(output)


def _parse_usage(raw: object) -> dict[str, float]:
    if not isinstance(raw, dict):
        return {}
    usage: dict[str, float] = {}
    for browser, value in cast(dict[str, object], raw).items():
        if not isinstance(value, dict):
            continue
        daily = value.get("daily")
        if isinstance(daily, (int, float)) and not isinstance(daily, bool):
            usage[str(browser)] = float(daily)
    return usage


def _parse_spec_links(raw: object) -> tuple[str, ...]:
    if not isinstance(raw, dict):
        return ()
    links = raw.get("links")
    if not isinstance(links, list):
        return ()
    output: list[str] = []
    for entry in links:
        link = _clean_str(entry.get("link")) if isinstance(entry, dict) else None
        if link:
            output.append(link)
    return tuple(output)


def parse_feature_record(raw: Mapping[str, object]) -> FeatureRecord | None:
    """Build a record from one WebStatus-shaped entry; ``None`` if unusable."""
    feature_id = _clean_str(raw.get("feature_id"))
    if feature_id is None:
        return None
    status, low_date = _parse_baseline(raw.get("baseline"))
    return FeatureRecord(
        feature_id=feature_id,
        name=_clean_str(raw.get("name")) or feature_id,
        baseline_status=status,
        baseline_low_date=low_date,
        browser_implementations=_parse_implementations(raw.get("browser_implementations")),
        usage=_parse_usage(raw.get("usage")),
        spec_links=_parse_spec_links(raw.get("spec")),
    )


def parse_feature_dataset(payload: object, source: str) -> list[FeatureRecord]:
    """Parse a ``{"data": [...]}`` payload (or a bare list) into records."""
    entries = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise DatasetError(source, cause="expected a list of features")

    records: list[FeatureRecord] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        record = parse_feature_record(cast(dict[str, object], entry))
        if record is None:
            LOGGER.debug("Skipping dataset entry without feature_id in %s", source)
            continue
        records.append(record)
    return records


def load_feature_dataset(path: str | Path) -> StaticFeatureLookup:
    """Load a local JSON snapshot into a lookup service."""
    source = str(path)
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise DatasetError(source, cause=exc.__class__.__name__) from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DatasetError(source, cause="invalid JSON") from exc

    lookup = StaticFeatureLookup(parse_feature_dataset(payload, source))
    LOGGER.debug("Loaded %d features from %s", len(lookup), source)
    return lookup


def default_lookup() -> StaticFeatureLookup:
    """Load the feature snapshot bundled with the package."""
    dataset = resources.files("baselineguard").joinpath("data").joinpath(BUNDLED_DATASET)
    with resources.as_file(dataset) as path:
        return load_feature_dataset(path)


def severity_hint(status: BaselineStatus) -> SeverityHint:
    """Map a Baseline status to the severity a diagnostic should carry."""
    return cast(SeverityHint, SEVERITY_BY_STATUS.get(status, "information"))
