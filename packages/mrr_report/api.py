"""Public API orchestration for the ``mrr_report`` package.

Ties the CSV ingest layer, period derivation and the pure consolidator
together for callers that start from a file on disk.
"""

from __future__ import annotations

from os import PathLike

from .consolidate import build
from .ingest import load_delta_rows
from .logging_setup import get_logger
from .models import Report
from .period import derive_period_label

_logger = get_logger("mrr_report.api")


def build_report_from_csv(
    csv_path: str | PathLike[str], *, period_label: str | None = None
) -> Report:
    """Load ``csv_path`` and consolidate it into a :class:`Report`.

    When ``period_label`` is ``None`` it is derived from the filename (see
    :func:`mrr_report.period.derive_period_label`). File and CSV errors
    propagate unchanged.
    """

    records = load_delta_rows(csv_path)
    label = derive_period_label(csv_path) if period_label is None else period_label
    _logger.info("loaded %d rows from %s (period=%r)", len(records), csv_path, label)
    return build(records, label)


__all__ = ["build_report_from_csv"]
