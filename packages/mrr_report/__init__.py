"""Public interface for the ``mrr_report`` package.

Re-exports the consolidator, the report models and the I/O helpers used to
produce an MRR changes report from a CSV export.
"""

from .api import build_report_from_csv
from .consolidate import ZERO_EPSILON, MalformedInputError, build
from .ingest import load_delta_rows, read_delta_rows
from .models import (
    CHANGE_TYPE,
    COMPANY_NAME,
    DELTA_AMOUNT,
    Category,
    ClassifiedRow,
    DeltaRow,
    RawRecord,
    Report,
)
from .period import derive_period_label, report_title
from .render import render_text, report_to_csv, write_csv

__all__ = [
    # API
    "build",
    "build_report_from_csv",
    "derive_period_label",
    "load_delta_rows",
    "read_delta_rows",
    "render_text",
    "report_title",
    "report_to_csv",
    "write_csv",
    # Models / types
    "CHANGE_TYPE",
    "COMPANY_NAME",
    "DELTA_AMOUNT",
    "Category",
    "ClassifiedRow",
    "DeltaRow",
    "MalformedInputError",
    "RawRecord",
    "Report",
    "ZERO_EPSILON",
]
