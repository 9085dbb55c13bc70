import dataclasses
import random
from decimal import Decimal
from typing import Any

import pytest

from mrr_report import Category, ClassifiedRow, MalformedInputError, Report, build
from mrr_report.consolidate import _collation_key

# ---- Helpers -----------------------------------------------------------------


def _rec(name: Any, kind: Any, delta: Any) -> dict[str, Any]:
    return {"Company Name": name, "Type": kind, "Total MRR Delta": delta}


def _rows(report: Report) -> list[tuple[str, float, str]]:
    return [(r.company_name, r.net_change, str(r.category)) for r in report.rows]


def _mixed_records() -> list[dict[str, Any]]:
    return [
        _rec("Acme", "New", 500),
        _rec("Beta", "Contraction", -50),
        _rec("Cobalt", "Expansion", 200),
        _rec("Beta", "Churn", -60),
        _rec("Delta", "Expansion", 300),
        _rec("Echo", "Contraction", -20),
        _rec("Foxtrot", "New", 100),
    ]


def _random_records(seed: int, n: int = 300) -> list[dict[str, Any]]:
    rng = random.Random(seed)
    names = ["Acme", "acme", "Beta", "Émile", "Eagle", "Zed", "Orbit", "Nova", "", None]
    kinds = ["New", "Churn", "Expansion", "Contraction", "Reactivation", None]
    out = []
    for _ in range(n):
        delta = None if rng.random() < 0.05 else round(rng.uniform(-500, 500), 2)
        out.append(_rec(rng.choice(names), rng.choice(kinds), delta))
    return out


def _assert_sorted(report: Report) -> None:
    for a, b in zip(report.rows, report.rows[1:], strict=False):
        if a.category.value != b.category.value:
            assert a.category.value > b.category.value
        elif a.net_change != b.net_change:
            assert a.net_change > b.net_change
        else:
            assert _collation_key(a.company_name) < _collation_key(b.company_name)


# ---- Scenarios -----------------------------------------------------------------


def test_new_signal_wins_over_larger_expansion():
    report = build([_rec("Acme", "New", 500), _rec("Acme", "Expansion", 100)], "")
    assert report.rows == (ClassifiedRow("Acme", 600.0, Category.NEW),)


def test_churn_signal_marks_negative_aggregate():
    report = build([_rec("Beta", "Contraction", -50), _rec("Beta", "Churn", -60)], "")
    assert _rows(report) == [("Beta", -110.0, "Churn")]


def test_net_zero_company_is_dropped_regardless_of_signals():
    report = build([_rec("Gamma", "New", 50), _rec("Gamma", "Churn", -50)], "")
    assert report.rows == ()
    assert dict(report.category_totals) == {}
    assert report.net_total == 0.0


def test_equal_change_and_category_sort_by_name():
    report = build([_rec("Zeta", "Expansion", 100), _rec("Alpha", "Expansion", 100)], "")
    assert [r.company_name for r in report.rows] == ["Alpha", "Zeta"]


def test_full_ordering_and_rollups():
    report = build(_mixed_records(), "March 2024")

    assert _rows(report) == [
        ("Acme", 500.0, "New"),
        ("Foxtrot", 100.0, "New"),
        ("Delta", 300.0, "Expansion"),
        ("Cobalt", 200.0, "Expansion"),
        ("Echo", -20.0, "Contraction"),
        ("Beta", -110.0, "Churn"),
    ]
    # Totals iterate in first-seen order among the sorted rows.
    assert list(report.category_totals.items()) == [
        (Category.NEW, 600.0),
        (Category.EXPANSION, 500.0),
        (Category.CONTRACTION, -20.0),
        (Category.CHURN, -110.0),
    ]
    assert report.net_total == pytest.approx(970.0)
    assert report.period_label == "March 2024"


def test_empty_input_yields_empty_report():
    report = build([], "")
    assert report == Report(rows=(), category_totals={}, net_total=0.0, period_label="")


# ---- Classification rules ------------------------------------------------------


def test_positive_net_without_new_is_expansion_even_with_churn_record():
    report = build([_rec("X", "Churn", -10), _rec("X", "Expansion", 50)], "")
    assert _rows(report) == [("X", 40.0, "Expansion")]


def test_negative_net_without_churn_is_contraction_even_with_new_record():
    report = build([_rec("Y", "New", 10), _rec("Y", "Contraction", -50)], "")
    assert _rows(report) == [("Y", -40.0, "Contraction")]


def test_single_tiny_new_event_tags_whole_aggregate():
    records = [_rec("Z", "Expansion", 1000) for _ in range(5)] + [_rec("Z", "New", 1)]
    report = build(records, "")
    assert _rows(report) == [("Z", 5001.0, "New")]


def test_unknown_types_are_neutral():
    report = build([_rec("Q", "Reactivation", 30), _rec("R", None, -30)], "")
    assert _rows(report) == [("Q", 30.0, "Expansion"), ("R", -30.0, "Contraction")]


def test_signal_matching_is_exact():
    report = build([_rec("Q", "new", 30), _rec("R", "CHURN", -30)], "")
    assert [r.category for r in report.rows] == [Category.EXPANSION, Category.CONTRACTION]


def test_zero_threshold_boundaries():
    report = build(
        [
            _rec("Keep", "Expansion", 0.01),
            _rec("DropPos", "Expansion", 0.005),
            _rec("DropNeg", "Contraction", -0.009),
            _rec("Noise", "Expansion", 0.1),
            _rec("Noise", "Expansion", 0.2),
            _rec("Noise", "Contraction", -0.3),
        ],
        "",
    )
    assert [r.company_name for r in report.rows] == ["Keep"]


def test_grouping_is_case_sensitive():
    report = build([_rec("acme", "New", 10), _rec("Acme", "New", 20)], "")
    assert sorted(r.company_name for r in report.rows) == ["Acme", "acme"]


# ---- Filtering -----------------------------------------------------------------


def test_incomplete_records_contribute_nothing():
    base = _mixed_records()
    baseline = build(base, "p")
    noisy = [
        *base,
        _rec("", "New", 999),
        _rec(None, "New", 999),
        _rec("Acme", "New", None),
        {"Company Name": "Acme", "Type": "Churn"},
        {"Type": "New", "Total MRR Delta": 5},
    ]
    assert build(noisy, "p") == baseline


def test_removing_one_incomplete_record_does_not_change_result():
    with_bad = [*_mixed_records(), _rec("Acme", "Churn", None)]
    assert build(with_bad, "") == build(_mixed_records(), "")


def test_text_deltas_are_coerced_and_garbage_is_skipped():
    report = build(
        [
            _rec("Acme", "New", "1,200.50"),
            _rec("Acme", "Expansion", "n/a"),
            _rec("Beta", "Churn", "(75)"),
            _rec("Beta", "Churn", "  "),
        ],
        "",
    )
    assert _rows(report) == [("Acme", 1200.5, "New"), ("Beta", -75.0, "Churn")]


def test_non_finite_deltas_are_skipped():
    report = build([_rec("A", "New", float("nan")), _rec("B", "New", float("inf"))], "")
    assert report.rows == ()


def test_out_of_range_numeric_deltas_are_skipped():
    report = build(
        [
            _rec("Huge", "New", 10**400),
            _rec("Signal", "New", Decimal("sNaN")),
            _rec("Text", "New", "1e400"),
            _rec("Fine", "New", Decimal("12.50")),
        ],
        "",
    )
    assert _rows(report) == [("Fine", 12.5, "New")]


# ---- Ordering ------------------------------------------------------------------


def test_name_order_is_case_and_accent_insensitive():
    records = [_rec(n, "Expansion", 10) for n in ("banana", "Émile", "apple", "Eagle", "Fred")]
    report = build(records, "")
    assert [r.company_name for r in report.rows] == ["apple", "banana", "Eagle", "Émile", "Fred"]


def test_name_order_puts_lowercase_before_uppercase_on_tie():
    report = build([_rec("ACME", "New", 10), _rec("acme", "New", 10)], "")
    assert [r.company_name for r in report.rows] == ["acme", "ACME"]


# ---- Properties ----------------------------------------------------------------


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_invariants_hold_for_generated_inputs(seed: int):
    report = build(_random_records(seed), "P")

    assert sum(report.category_totals.values()) == pytest.approx(report.net_total, abs=1e-6)
    assert sum(r.net_change for r in report.rows) == pytest.approx(report.net_total, abs=1e-6)
    assert all(abs(r.net_change) >= 0.01 for r in report.rows)
    assert len({r.company_name for r in report.rows}) == len(report.rows)
    _assert_sorted(report)


@pytest.mark.parametrize("seed", [3, 11])
def test_build_is_deterministic(seed: int):
    records = _random_records(seed)
    assert build(records, "P") == build(records, "P")


def test_accepts_any_iterable_of_records():
    assert build(iter(_mixed_records()), "") == build(_mixed_records(), "")
    assert build(tuple(_mixed_records()), "") == build(_mixed_records(), "")


def test_caller_records_are_not_mutated():
    records = _mixed_records()
    snapshot = [dict(r) for r in records]
    build(records, "")
    assert records == snapshot


# ---- Report immutability -------------------------------------------------------


def test_report_is_immutable():
    report = build(_mixed_records(), "")
    with pytest.raises(dataclasses.FrozenInstanceError):
        report.net_total = 0.0  # type: ignore[misc]
    with pytest.raises(TypeError):
        report.category_totals[Category.NEW] = 0.0  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        report.rows[0].net_change = 1.0  # type: ignore[misc]
    assert isinstance(report.rows, tuple)


def test_category_totals_accept_plain_string_keys():
    report = build(_mixed_records(), "")
    assert report.category_totals["New"] == 600.0


# ---- Malformed input -----------------------------------------------------------


@pytest.mark.parametrize(
    "bad",
    [None, 42, 3.5, "Acme,New,500", b"bytes", {"Company Name": "Acme"}, [1, 2], [("Acme", "New", 5)]],
)
def test_non_sequence_input_raises_malformed_input_error(bad: Any):
    with pytest.raises(MalformedInputError):
        build(bad, "")


def test_malformed_input_error_is_a_type_error():
    with pytest.raises(TypeError):
        build(None, "")  # type: ignore[arg-type]
