"""Flat-file state shared between the two pipeline stages.

The catalog stage writes ``[{"component", "forkPoint"}]``; the scan
stage reads it back (and refuses to start if it is missing or corrupt)
and writes the merged vulnerability list.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class ForkPointFileError(RuntimeError):
    """Raised when the fork point file is missing or malformed."""


class ForkPointEntry(BaseModel):
    """One ``{component, forkPoint}`` record of the intermediate file."""

    model_config = ConfigDict(populate_by_name=True)

    component: str = Field(min_length=1)
    fork_point: str = Field(alias="forkPoint", min_length=1)


_ENTRIES = TypeAdapter(list[ForkPointEntry])


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON to ``path`` atomically (write-then-rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    tmp.replace(path)


def write_fork_points(path: Path, entries: list[dict[str, str]]) -> None:
    """Persist resolved fork points for the scan stage.

    Args:
        path: Output file.
        entries: ``[{"component", "forkPoint"}]`` records.
    """
    _write_json_atomic(path, entries)


def load_fork_points(path: Path) -> list[ForkPointEntry]:
    """Read and validate the fork point file.

    Args:
        path: File written by the catalog stage.

    Returns:
        Validated entries in file order.

    Raises:
        ForkPointFileError: if the file is missing, not JSON, or does
            not hold a list of ``{component, forkPoint}`` objects.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ForkPointFileError(f"Failed to read {path}: {e}") from e
    try:
        return _ENTRIES.validate_json(content)
    except ValidationError as e:
        raise ForkPointFileError(f"Malformed fork point file {path}: {e}") from e


def write_results(path: Path, records: list[dict[str, Any]]) -> None:
    """Persist the deduplicated vulnerability list."""
    _write_json_atomic(path, records)
