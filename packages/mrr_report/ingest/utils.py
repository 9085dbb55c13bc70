"""Ingest helpers shared by the CLI and the API.

Loads raw MRR delta records from CSV text or a CSV file, validating that the
header carries the columns the consolidator needs.
"""

from __future__ import annotations

import csv
from io import StringIO
from os import PathLike
from pathlib import Path
from typing import IO, Any

from .adapters.delta_csv import REQUIRED_HEADERS, to_records


def _read(f: IO[str], *, source: str) -> list[dict[str, Any]]:
    reader = csv.DictReader(f)
    headers = reader.fieldnames
    if not headers:
        raise csv.Error(f"CSV appears to have no header row: {source}")
    # Tolerate stray whitespace around header names.
    reader.fieldnames = [h.strip() if h is not None else h for h in headers]
    missing = sorted(h for h in REQUIRED_HEADERS if h not in reader.fieldnames)
    if missing:
        raise csv.Error("CSV header mismatch. Missing columns: " + ", ".join(missing))
    return list(to_records(reader))


def read_delta_rows(csv_text: str) -> list[dict[str, Any]]:
    """Parse CSV text into raw records (see :func:`load_delta_rows`)."""

    # A leading BOM would otherwise stick to the first header name.
    with StringIO(csv_text.removeprefix("\ufeff"), newline="") as f:
        return _read(f, source="<text>")


def load_delta_rows(csv_path: str | PathLike[str]) -> list[dict[str, Any]]:
    """Read an MRR-delta CSV file and return raw records in file order.

    Raises ``FileNotFoundError``/``PermissionError`` from opening the file and
    ``csv.Error`` when the header is absent or lacks required columns.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        return _read(f, source=str(p))


__all__ = ["load_delta_rows", "read_delta_rows"]
