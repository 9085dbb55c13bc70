"""Data models and type aliases for ``mrr_report``.

Raw input rows are kept as opaque mappings keyed by the CSV header names so
that callers can hand over whatever their tokenizer produced. Everything the
consolidator emits is immutable.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from types import MappingProxyType
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Input boundary
# ---------------------------------------------------------------------------

COMPANY_NAME = "Company Name"
CHANGE_TYPE = "Type"
DELTA_AMOUNT = "Total MRR Delta"

RawRecord: TypeAlias = Mapping[str, Any]
"""A single revenue-delta row keyed by the CSV header names.

Expected keys are :data:`COMPANY_NAME`, :data:`CHANGE_TYPE` and
:data:`DELTA_AMOUNT`. Any of them may be missing or ``None``; the
consolidator filters such rows rather than failing.
"""


def _finite_float(value: int | float | Decimal) -> float:
    # float() overflows on huge ints and rejects signalling NaN decimals.
    try:
        out = float(value)
    except (OverflowError, ValueError) as exc:
        raise ValueError(f"invalid amount: {value!r}") from exc
    if not math.isfinite(out):
        raise ValueError(f"invalid amount: {value!r}")
    return out


def parse_amount(raw: Any) -> float | None:
    """Coerce a cell value into a ``float`` delta.

    Finite numbers pass through as floats. Strings accept an optional sign,
    ``$``, thousands separators and accounting parentheses (``"(50.00)"`` is
    ``-50.0``). Empty or whitespace-only strings yield ``None``. Anything else
    raises ``ValueError``, including numbers too large for a float.
    """

    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    if isinstance(raw, int | float | Decimal):
        return _finite_float(raw)
    s = str(raw).strip()
    if not s:
        return None

    negative = False
    # Strip leading sign, currency symbol and surrounding parentheses until
    # stable so any ordering of these markers is accepted.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return _finite_float(-abs(d) if negative else d)


class DeltaRow(BaseModel):
    """Validated view of one CSV row.

    Field aliases are the CSV headers. Text cells are trimmed and empty text
    becomes ``None``; the delta cell is coerced with :func:`parse_amount`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    company_name: str | None = Field(default=None, alias=COMPANY_NAME)
    change_type: str | None = Field(default=None, alias=CHANGE_TYPE)
    delta_amount: float | None = Field(default=None, alias=DELTA_AMOUNT)

    @field_validator("company_name", "change_type", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        if v is None:
            return None
        s = str(v).strip()
        return s or None

    @field_validator("delta_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v: Any) -> float | None:
        return parse_amount(v)

    def to_record(self) -> dict[str, Any]:
        """Return the row as a :data:`RawRecord` keyed by header names."""

        return {
            COMPANY_NAME: self.company_name,
            CHANGE_TYPE: self.change_type,
            DELTA_AMOUNT: self.delta_amount,
        }


# ---------------------------------------------------------------------------
# Consolidated output
# ---------------------------------------------------------------------------


class Category(StrEnum):
    """Classification of a company's net change.

    Values are the display labels; ordering comparisons between members are
    plain string comparisons of those labels.
    """

    NEW = "New"
    EXPANSION = "Expansion"
    CHURN = "Churn"
    CONTRACTION = "Contraction"


@dataclass(frozen=True, slots=True)
class ClassifiedRow:
    """One company's consolidated, classified net change."""

    company_name: str
    net_change: float
    category: Category


def _frozen_totals(totals: Mapping[Category, float]) -> Mapping[Category, float]:
    return MappingProxyType(dict(totals))


@dataclass(frozen=True, slots=True)
class Report:
    """The finished MRR changes report.

    Attributes
    ----------
    rows:
        Classified rows in final display order.
    category_totals:
        Sum of ``net_change`` per category, iterated in the order each
        category first appears in ``rows``. Read-only.
    net_total:
        Sum of ``net_change`` over all rows.
    period_label:
        Human-readable billing period (e.g. ``"March 2024"``), possibly empty.
    """

    rows: tuple[ClassifiedRow, ...] = ()
    category_totals: Mapping[Category, float] = field(
        default_factory=lambda: MappingProxyType({})
    )
    net_total: float = 0.0
    period_label: str = ""

    def __post_init__(self) -> None:
        # Normalize caller-supplied containers into immutable ones.
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "category_totals", _frozen_totals(self.category_totals))
