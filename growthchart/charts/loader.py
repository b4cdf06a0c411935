"""
Loading of reference growth-standard files.

Manifest and chart files are JSON (YAML is accepted too). The numeric
routines never read files; this module turns them into models first.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from growthchart.config import get_config
from growthchart.exceptions import ReferenceDataError
from growthchart.models import CentileData, CentileManifestEntry


def _read_structured(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReferenceDataError(f"Cannot read reference file {path}: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ReferenceDataError(f"Malformed reference file {path}: {e}") from e


def load_manifest(path: Path | str) -> list[CentileManifestEntry]:
    """
    Load the list of available reference charts.

    Args:
        path: Manifest file

    Returns:
        Manifest entries in file order
    """
    path = Path(path)
    raw = _read_structured(path)
    if not isinstance(raw, list):
        raise ReferenceDataError(f"Manifest {path} must be a list of entries")
    try:
        return [CentileManifestEntry.model_validate(entry) for entry in raw]
    except ValidationError as e:
        raise ReferenceDataError(f"Invalid manifest entry in {path}: {e}") from e


def load_centile_data(path: Path | str) -> CentileData:
    """Load one reference chart payload."""
    path = Path(path)
    raw = _read_structured(path)
    try:
        return CentileData.model_validate(raw)
    except ValidationError as e:
        raise ReferenceDataError(f"Invalid chart data in {path}: {e}") from e


def resolve_reference_file(path: Path | str) -> Path:
    """
    Locate a reference file given on its own, such as a chart passed to the CLI.

    A relative path is taken from GROWTHCHART_REFERENCE_DIR when that is set,
    and from the working directory otherwise.
    """
    path = Path(path)
    reference_dir = get_config().reference_path
    if path.is_absolute() or reference_dir is None:
        return path
    return reference_dir / path


def resolve_data_file(entry: CentileManifestEntry, base_dir: Path | str | None = None) -> Path:
    """
    Locate a manifest entry's payload.

    Relative ``dataFile`` pointers are resolved against ``base_dir``, or
    GROWTHCHART_REFERENCE_DIR when no base is given; a leading slash is
    treated as relative too.
    """
    pointer = Path(entry.data_file.lstrip("/"))
    if base_dir is None:
        base_dir = get_config().reference_path
    if base_dir is None:
        return pointer
    return Path(base_dir) / pointer


def load_chart_for_entry(entry: CentileManifestEntry, base_dir: Path | str | None = None) -> CentileData:
    return load_centile_data(resolve_data_file(entry, base_dir))
