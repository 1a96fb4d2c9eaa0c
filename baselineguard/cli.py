"""Console script for baselineguard."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console

from ._version import __version__ as _version
from .constants import DEBUG_ENV_VAR, EXTENSION_LANGUAGE_MAP
from .detector import FeatureDetector
from .exceptions import BaselineGuardError
from .lookup import StaticFeatureLookup, default_lookup, load_feature_dataset
from .render_basic import render_detections


def debug_enabled() -> bool:
    """Check debug mode env flag."""
    return os.environ.get(DEBUG_ENV_VAR, "").strip() == "1"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug or debug_enabled() else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def language_for_path(path: Path) -> str | None:
    return EXTENSION_LANGUAGE_MAP.get(path.suffix.lower())


def _load_lookup(features_path: Path | None) -> StaticFeatureLookup:
    if features_path is None:
        return default_lookup()
    return load_feature_dataset(features_path)


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise click.ClickException(f"Unable to read {path} ({exc.__class__.__name__})") from exc


@click.argument(
    "paths",
    metavar="<path>",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--language",
    "-l",
    "language_id",
    default=None,
    help="Language id to use instead of guessing from the file extension.",
)
@click.option(
    "--features",
    "features_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="WebStatus-style JSON snapshot to use instead of the bundled one.",
)
@click.option("--json", "as_json", is_flag=True, help="Emit detections as JSON.")
@click.option("--debug", is_flag=True, help="Log detection details to stderr.")
@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(_version, "-v", "--version")
def main(
    paths: tuple[Path, ...],
    language_id: str | None,
    features_path: Path | None,
    as_json: bool,
    debug: bool,
) -> None:
    """
    Flag modern web-platform features and their Baseline support

    \b
    Example usages:
      baselineguard src/app.ts
      baselineguard styles/*.css --json
      baselineguard page.tpl --language html
    """
    _configure_logging(debug)

    try:
        lookup = _load_lookup(features_path)
        detector = FeatureDetector(lookup)
    except BaselineGuardError as exc:
        raise click.ClickException(str(exc)) from exc

    console = Console()
    report: list[dict[str, object]] = []
    for path in paths:
        file_language = language_id or language_for_path(path)
        if file_language is None:
            click.echo(f"Skipping {path}: unknown language (use --language)", err=True)
            continue

        text = _read_source(path)
        detections = detector.detect_features(
            str(path.resolve()), path.stat().st_mtime_ns, file_language, text
        )

        if as_json:
            report.append(
                {
                    "path": str(path),
                    "language": file_language,
                    "detections": [detection.to_dict() for detection in detections],
                }
            )
        else:
            console.print(render_detections(str(path), file_language, detections, lookup))

    if as_json:
        click.echo(json.dumps({"files": report}, indent=2, ensure_ascii=False))
