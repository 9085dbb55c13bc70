"""Derive a human-readable billing period from an export's filename."""

from __future__ import annotations

import re
from os import PathLike
from pathlib import PurePath

REPORT_TITLE = "MRR Changes Report"

# Two back-to-back YYYYMMDD tokens, e.g. ``mrr_2024030120240331.csv``.
_DATE_RANGE_RE = re.compile(r"(\d{8})(\d{8})")


def derive_period_label(source_name: str | PathLike[str]) -> str:
    """Return ``"<MonthName> <Year>"`` for the first date of a range token.

    Only the final path component is searched. Returns ``""`` when no
    ``YYYYMMDDYYYYMMDD`` run is present or its month is not 1..12.
    """

    name = PurePath(source_name).name
    match = _DATE_RANGE_RE.search(name)
    if match is None:
        return ""
    start = match.group(1)
    year, month = start[:4], int(start[4:6])
    if not 1 <= month <= 12:
        return ""
    return f"{_MONTH_NAMES[month - 1]} {year}"


def report_title(period_label: str) -> str:
    """Return the report heading, suffixed with the period when known."""

    return f"{REPORT_TITLE} - {period_label}" if period_label else REPORT_TITLE


_MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

__all__ = ["REPORT_TITLE", "derive_period_label", "report_title"]
