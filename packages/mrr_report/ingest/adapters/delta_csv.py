"""Adapter for mapping an MRR-delta CSV export to raw records.

CSV header (required keys): ``Company Name``, ``Total MRR Delta``.
Optional: ``Type``. Other columns are ignored.

Output record keys: ``Company Name``, ``Type``, ``Total MRR Delta`` (see
:mod:`mrr_report.models`).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from ...logging_setup import get_logger
from ...models import CHANGE_TYPE, COMPANY_NAME, DELTA_AMOUNT, DeltaRow

REQUIRED_HEADERS: frozenset[str] = frozenset({COMPANY_NAME, DELTA_AMOUNT})

_logger = get_logger("mrr_report.ingest.delta_csv")


def _is_blank(row: Mapping[str, Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in row.values())


def to_records(rows: Iterable[Mapping[str, Any]]) -> Iterator[dict[str, Any]]:
    """Convert CSV rows to raw records.

    Mapping rules:
    - Rows whose cells are all empty are skipped.
    - ``Company Name`` and ``Type`` are trimmed; empty becomes ``None``.
    - ``Total MRR Delta`` is coerced to ``float``; empty becomes ``None``.
      Unparseable amounts are logged and also become ``None`` so the
      consolidator filters the row.
    """

    for line_no, row in enumerate(rows, start=1):
        if _is_blank(row):
            continue
        cells = {
            COMPANY_NAME: row.get(COMPANY_NAME),
            CHANGE_TYPE: row.get(CHANGE_TYPE),
            DELTA_AMOUNT: row.get(DELTA_AMOUNT),
        }
        try:
            parsed = DeltaRow.model_validate(cells)
        except ValidationError:
            _logger.warning(
                "row %d: unparseable %r value %r; treating as missing",
                line_no,
                DELTA_AMOUNT,
                cells[DELTA_AMOUNT],
            )
            parsed = DeltaRow.model_validate({**cells, DELTA_AMOUNT: None})
        yield parsed.to_record()


__all__ = ["REQUIRED_HEADERS", "to_records"]
