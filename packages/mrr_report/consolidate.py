"""Consolidate raw MRR delta records into a classified, sorted report.

Public API:
    - :func:`build`
    - :class:`MalformedInputError`

The module is pure: no I/O, no module-level mutable state. Each call owns its
working aggregates, so concurrent calls need no coordination.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .logging_setup import get_logger
from .models import (
    CHANGE_TYPE,
    COMPANY_NAME,
    DELTA_AMOUNT,
    Category,
    ClassifiedRow,
    RawRecord,
    Report,
    parse_amount,
)

# Net changes smaller than this (in absolute value) are treated as noise.
ZERO_EPSILON: float = 0.01

NEW_SIGNAL: str = "New"
CHURN_SIGNAL: str = "Churn"

_logger = get_logger("mrr_report.consolidate")


class MalformedInputError(TypeError):
    """Raised when ``records`` is not a sequence of record mappings."""


@dataclass(slots=True)
class _CompanyAggregate:
    total_delta: float = 0.0
    saw_new: bool = False
    saw_churn: bool = False


# ---- Internal helpers --------------------------------------------------------


def _coerce_records(records: Any) -> list[RawRecord]:
    """Materialize ``records`` and check its shape.

    Strings, bytes and single mappings are iterable but are not record
    sequences, so they are rejected along with non-iterables.
    """

    not_a_sequence = isinstance(records, str | bytes | bytearray | Mapping)
    if records is None or not_a_sequence or not isinstance(records, Iterable):
        raise MalformedInputError(
            f"build expects a sequence of record mappings, got {type(records).__name__}"
        )
    seq = list(records)
    for i, item in enumerate(seq):
        if not isinstance(item, Mapping):
            raise MalformedInputError(
                f"record {i} is not a mapping (got {type(item).__name__})"
            )
    return seq


def _delta_of(record: RawRecord) -> float | None:
    # Untyped cells (e.g. straight from csv.DictReader) are coerced the same
    # way the ingest layer does. Unparseable, non-finite and out-of-range
    # values count as absent.
    try:
        return parse_amount(record.get(DELTA_AMOUNT))
    except ValueError:
        return None


def _group_by_company(records: list[RawRecord]) -> tuple[dict[str, _CompanyAggregate], int]:
    """Fold records into per-company aggregates in first-appearance order.

    Returns ``(aggregates, discarded_count)``.
    """

    aggregates: dict[str, _CompanyAggregate] = {}
    discarded = 0
    for record in records:
        name = record.get(COMPANY_NAME)
        delta = _delta_of(record)
        if not name or delta is None:
            discarded += 1
            continue
        key = name if isinstance(name, str) else str(name)

        agg = aggregates.get(key)
        if agg is None:
            agg = aggregates[key] = _CompanyAggregate()
        agg.total_delta += delta
        change_type = record.get(CHANGE_TYPE)
        if change_type == NEW_SIGNAL:
            agg.saw_new = True
        elif change_type == CHURN_SIGNAL:
            agg.saw_churn = True
    return aggregates, discarded


def _classify(agg: _CompanyAggregate) -> Category | None:
    """Return the category for an aggregate, or ``None`` when it nets to zero."""

    if abs(agg.total_delta) < ZERO_EPSILON:
        return None
    if agg.total_delta > 0:
        return Category.NEW if agg.saw_new else Category.EXPANSION
    return Category.CHURN if agg.saw_churn else Category.CONTRACTION


def _collation_key(name: str) -> tuple[str, str, str, str]:
    """Locale-style ordering key for company names.

    Compares accent- and case-insensitively first, then by accents, then by
    case with lowercase ahead of uppercase, then by the exact string so that
    distinct names never compare equal. Independent of the process locale.
    """

    folded = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return base, folded, name.swapcase(), name


def _sort_rows(rows: list[ClassifiedRow]) -> list[ClassifiedRow]:
    """Order rows by category desc, then net change desc, then name asc.

    Applied as successive stable sorts from the least to the most
    significant tier.
    """

    ordered = sorted(rows, key=lambda r: _collation_key(r.company_name))
    ordered.sort(key=lambda r: r.net_change, reverse=True)
    ordered.sort(key=lambda r: r.category.value, reverse=True)
    return ordered


# ---- Public API --------------------------------------------------------------


def build(records: Iterable[RawRecord], period_label: str = "") -> Report:
    """Consolidate ``records`` into a :class:`~mrr_report.models.Report`.

    Steps
    -----
    1. Group records by exact company name, summing ``Total MRR Delta`` and
       noting whether any record had ``Type`` ``"New"`` or ``"Churn"``.
       Records without a company name or delta are skipped.
    2. Drop companies whose net change is below one cent in magnitude;
       classify the rest as New/Expansion (positive) or Churn/Contraction
       (negative). A single New or Churn record is enough to set the label.
    3. Sort by category descending, net change descending, name ascending.
    4. Compute per-category totals and the overall net total.

    Raises
    ------
    MalformedInputError
        If ``records`` is not an iterable of mappings.
    """

    seq = _coerce_records(records)
    aggregates, discarded = _group_by_company(seq)

    rows: list[ClassifiedRow] = []
    dropped_zero = 0
    for name, agg in aggregates.items():
        category = _classify(agg)
        if category is None:
            dropped_zero += 1
            continue
        rows.append(ClassifiedRow(company_name=name, net_change=agg.total_delta, category=category))

    ordered = _sort_rows(rows)

    category_totals: dict[Category, float] = {}
    for row in ordered:
        category_totals[row.category] = category_totals.get(row.category, 0.0) + row.net_change

    net_total = 0.0
    for row in ordered:
        net_total += row.net_change

    _logger.debug(
        "consolidated %d records into %d rows (discarded=%d, net_zero=%d)",
        len(seq),
        len(ordered),
        discarded,
        dropped_zero,
    )

    return Report(
        rows=tuple(ordered),
        category_totals=category_totals,
        net_total=net_total,
        period_label=period_label,
    )


__all__ = ["MalformedInputError", "ZERO_EPSILON", "build"]
