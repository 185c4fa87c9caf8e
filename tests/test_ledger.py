from __future__ import annotations

from datetime import date

import pytest

from community_ledger.errors import InvalidAmount
from community_ledger.ledger import compute_year_ledger, summarize_ledger
from community_ledger.models import MonthlyDueRecord


TODAY = date(2025, 6, 15)
DUE = 75000


def _rec(month: int, paid: int, year: int = 2025, **kw) -> MonthlyDueRecord:
    # `paid` in whole pesos to keep fixtures readable
    return MonthlyDueRecord(resident_id="R-1", year=year, month=month, total_paid_cents=paid * 100, **kw)


PAYMENT_PATTERNS = [
    [],
    [_rec(1, 750), _rec(2, 750), _rec(3, 750)],
    [_rec(3, 3000)],
    [_rec(1, 100), _rec(2, 5000), _rec(7, 200), _rec(12, 900)],
    [_rec(m, 400) for m in range(1, 13)],
]


@pytest.mark.parametrize("records", PAYMENT_PATTERNS, ids=["none", "on-time", "lump", "mixed", "partial"])
def test_ledger_has_twelve_months_and_never_both_owed_and_advanced(records: list[MonthlyDueRecord]) -> None:
    ledger = compute_year_ledger(records, 2025, today=TODAY, monthly_due_cents=DUE)

    assert [m.month for m in ledger.months] == list(range(1, 13))
    for m in ledger.months:
        assert not (m.balance_cents > 0 and m.advance_payment_cents > 0)
        assert m.balance_cents >= 0 and m.advance_payment_cents >= 0


@pytest.mark.parametrize("records", PAYMENT_PATTERNS, ids=["none", "on-time", "lump", "mixed", "partial"])
def test_carry_forward_adds_previous_balance(records: list[MonthlyDueRecord]) -> None:
    ledger = compute_year_ledger(records, 2025, today=TODAY, monthly_due_cents=DUE)

    assert ledger.months[0].previous_balance_cents == 0
    for prev, cur in zip(ledger.months, ledger.months[1:]):
        assert cur.previous_balance_cents == prev.balance_cents
        assert cur.total_required_cents == DUE + prev.balance_cents


def test_ledger_is_idempotent() -> None:
    records = [_rec(1, 750), _rec(4, 1200)]
    a = compute_year_ledger(records, 2025, today=TODAY, monthly_due_cents=DUE)
    b = compute_year_ledger(records, 2025, today=TODAY, monthly_due_cents=DUE)
    assert a == b


def test_no_payments_accumulates_and_flags_elapsed_months() -> None:
    ledger = compute_year_ledger([], 2025, today=TODAY, monthly_due_cents=DUE)

    assert ledger.month(1).balance_cents == 75000
    assert ledger.month(5).balance_cents == 375000
    assert ledger.month(12).balance_cents == 900000

    assert [m.month for m in ledger.months if m.is_overdue] == [1, 2, 3, 4, 5]
    assert [m.month for m in ledger.months if m.is_current_month] == [6]
    assert [m.month for m in ledger.months if m.is_future_month] == list(range(7, 13))
    assert not any(m.is_paid for m in ledger.months)


def test_month_names_are_filled_in() -> None:
    ledger = compute_year_ledger([], 2025, today=TODAY, monthly_due_cents=DUE)
    assert ledger.month(1).month_name == "January"
    assert ledger.month(12).month_name == "December"


def test_overpayment_is_advance_and_not_folded_into_next_month() -> None:
    ledger = compute_year_ledger([_rec(1, 1000)], 2025, today=TODAY, monthly_due_cents=DUE)

    jan, feb = ledger.month(1), ledger.month(2)
    assert jan.balance_cents == 0
    assert jan.advance_payment_cents == 25000
    assert jan.is_paid
    assert feb.total_required_cents == DUE
    assert feb.balance_cents == DUE


def test_lump_payment_clears_carried_balance() -> None:
    ledger = compute_year_ledger([_rec(3, 3000)], 2025, today=TODAY, monthly_due_cents=DUE)

    mar = ledger.month(3)
    assert mar.total_required_cents == 225000
    assert mar.balance_cents == 0
    assert mar.advance_payment_cents == 75000
    assert ledger.month(4).balance_cents == 75000


def test_records_for_same_month_are_summed() -> None:
    ledger = compute_year_ledger([_rec(2, 300), _rec(2, 450)], 2025, today=TODAY, monthly_due_cents=DUE)
    assert ledger.month(2).total_paid_cents == 75000


def test_last_status_wins_for_a_month() -> None:
    records = [_rec(2, 300, status="APPROVED"), _rec(2, 450, status="PENDING")]
    ledger = compute_year_ledger(records, 2025, today=TODAY, monthly_due_cents=DUE)
    assert ledger.month(2).status == "PENDING"
    assert ledger.month(3).status is None


def test_records_for_other_years_are_ignored() -> None:
    ledger = compute_year_ledger([_rec(1, 750, year=2024)], 2025, today=TODAY, monthly_due_cents=DUE)
    assert ledger.month(1).total_paid_cents == 0


def test_per_record_required_amount_overrides_base_due() -> None:
    ledger = compute_year_ledger(
        [_rec(2, 0, required_amount_cents=50000)],
        2025,
        today=TODAY,
        monthly_due_cents=DUE,
    )
    assert ledger.month(2).required_amount_cents == 50000
    assert ledger.month(2).total_required_cents == 75000 + 50000
    assert ledger.month(3).required_amount_cents == DUE


def test_negative_payment_is_rejected() -> None:
    with pytest.raises(InvalidAmount):
        compute_year_ledger([_rec(1, -5)], 2025, today=TODAY, monthly_due_cents=DUE)


def test_negative_monthly_due_is_rejected() -> None:
    with pytest.raises(InvalidAmount):
        compute_year_ledger([], 2025, today=TODAY, monthly_due_cents=-1)


def test_zero_due_month_is_not_marked_paid() -> None:
    ledger = compute_year_ledger([], 2025, today=TODAY, monthly_due_cents=0)
    assert all(m.balance_cents == 0 for m in ledger.months)
    assert not any(m.is_paid for m in ledger.months)


def test_future_year_has_no_overdue_months() -> None:
    ledger = compute_year_ledger([], 2026, today=TODAY, monthly_due_cents=DUE)
    assert not any(m.is_overdue for m in ledger.months)
    assert all(m.is_future_month for m in ledger.months)


def test_past_year_counts_every_unpaid_month_as_overdue() -> None:
    ledger = compute_year_ledger([_rec(1, 750, year=2024)], 2024, today=TODAY, monthly_due_cents=DUE)
    assert [m.month for m in ledger.months if m.is_overdue] == list(range(2, 13))


def test_summary_outstanding_is_latest_elapsed_balance() -> None:
    ledger = compute_year_ledger([_rec(1, 750)], 2025, today=TODAY, monthly_due_cents=DUE)
    summary = summarize_ledger(ledger, TODAY)

    assert summary.outstanding_cents == ledger.month(6).balance_cents == 375000
    assert summary.overdue_months == 4
    assert summary.should_archive is False


def test_summary_flags_archive_after_six_overdue_months() -> None:
    today = date(2025, 7, 1)
    ledger = compute_year_ledger([], 2025, today=today, monthly_due_cents=DUE)
    summary = summarize_ledger(ledger, today, archive_after_months=6)
    assert summary.overdue_months == 6
    assert summary.should_archive is True


def test_summary_totals_advance_payments() -> None:
    ledger = compute_year_ledger([_rec(1, 1000), _rec(2, 800)], 2025, today=TODAY, monthly_due_cents=DUE)
    assert summarize_ledger(ledger, TODAY).total_advance_cents == 25000 + 5000


def test_summary_of_missing_ledger_is_empty() -> None:
    summary = summarize_ledger(None, TODAY)
    assert summary.outstanding_cents == 0
    assert summary.should_archive is False
