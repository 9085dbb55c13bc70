"""Plain-text and CSV presentation of a finished :class:`Report`.

Amounts are shown with an explicit sign and two decimals (``+600.00``,
``-110.00``). No currency symbol or locale grouping is applied.
"""

from __future__ import annotations

import csv
from io import StringIO
from typing import IO

from .models import Report
from .period import report_title

_HEADERS: tuple[str, str, str] = ("Company Name", "MRR Change", "Category")
_TOTAL_LABEL = "Total Net MRR Change"


def format_amount(value: float) -> str:
    """Return ``value`` with an explicit sign and two decimals."""

    # Round first so tiny negatives render as +0.00 rather than -0.00.
    rounded = round(value, 2)
    if rounded == 0:
        rounded = 0.0
    return f"{rounded:+.2f}"


def render_text(report: Report) -> str:
    """Render ``report`` as a fixed-width text table with a category summary."""

    table = [(r.company_name, format_amount(r.net_change), str(r.category)) for r in report.rows]
    widths = [len(h) for h in _HEADERS]
    for cells in table:
        widths = [max(w, len(c)) for w, c in zip(widths, cells, strict=True)]

    def line(cells: tuple[str, str, str]) -> str:
        name, amount, category = cells
        return f"{name:<{widths[0]}}  {amount:>{widths[1]}}  {category:<{widths[2]}}".rstrip()

    title = report_title(report.period_label)
    out: list[str] = [title, "=" * len(title), ""]
    if report.period_label:
        out += [f"MRR Changes for {report.period_label}", ""]

    out.append(line(_HEADERS))
    out.append("  ".join("-" * w for w in widths))
    if table:
        out.extend(line(cells) for cells in table)
    else:
        out.append("(no changes)")

    summary = [(str(cat), format_amount(total)) for cat, total in report.category_totals.items()]
    summary.append((_TOTAL_LABEL, format_amount(report.net_total)))
    label_w = max(len(label) for label, _ in summary)
    amount_w = max(len(amount) for _, amount in summary)

    out += ["", "Summary by Category", ""]
    for label, amount in summary[:-1]:
        out.append(f"{label:<{label_w}}  {amount:>{amount_w}}")
    out.append("-" * (label_w + 2 + amount_w))
    label, amount = summary[-1]
    out.append(f"{label:<{label_w}}  {amount:>{amount_w}}")
    return "\n".join(out) + "\n"


def write_csv(report: Report, stream: IO[str]) -> None:
    """Write the report rows to ``stream`` as CSV in report order."""

    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(_HEADERS)
    for r in report.rows:
        writer.writerow((r.company_name, f"{r.net_change:.2f}", str(r.category)))


def report_to_csv(report: Report) -> str:
    """Return the CSV export of ``report`` as a string."""

    buf = StringIO()
    write_csv(report, buf)
    return buf.getvalue()


__all__ = ["format_amount", "render_text", "report_to_csv", "write_csv"]
