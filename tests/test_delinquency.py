from __future__ import annotations

from datetime import date

import pytest

from community_ledger.delinquency import compute_delinquency, count_consecutive_unpaid, last_settled_month
from community_ledger.ledger import compute_year_ledger
from community_ledger.models import MonthlyDueRecord, YearLedger
from community_ledger.payments import allocate_payment


DUE = 75000


def _ledger(payments: dict[int, int], today: date, year: int = 2025) -> YearLedger:
    records = [
        MonthlyDueRecord(resident_id="R-1", year=year, month=m, total_paid_cents=paid * 100)
        for m, paid in payments.items()
    ]
    return compute_year_ledger(records, year, today=today, monthly_due_cents=DUE, resident_id="R-1")


def test_five_unpaid_months_restrict() -> None:
    today = date(2025, 6, 10)
    ledger = _ledger({}, today)
    verdict = compute_delinquency(ledger, today)

    assert ledger.month(5).balance_cents == 375000
    assert verdict.must_restrict is True
    assert verdict.consecutive_unpaid == 5
    # The current month is listed too: it is owed, just not overdue yet.
    assert verdict.unpaid_months == [1, 2, 3, 4, 5, 6]


def test_lump_payment_in_march_breaks_the_streak() -> None:
    today = date(2025, 6, 10)
    ledger = _ledger({3: 3000}, today)
    verdict = compute_delinquency(ledger, today)

    assert ledger.month(3).balance_cents == 0
    assert verdict.consecutive_unpaid == 2
    assert verdict.must_restrict is False
    assert verdict.unpaid_months == [4, 5, 6]


def test_four_unpaid_months_do_not_restrict() -> None:
    today = date(2025, 6, 10)
    verdict = compute_delinquency(_ledger({1: 750}, today), today)
    assert verdict.consecutive_unpaid == 4
    assert verdict.must_restrict is False


def test_streak_only_counts_months_before_current() -> None:
    today = date(2025, 7, 1)
    verdict = compute_delinquency(_ledger({1: 750}, today), today)
    assert verdict.consecutive_unpaid == 5
    assert verdict.must_restrict is True


def test_paid_month_stops_scan_regardless_of_older_history() -> None:
    # Months 1-5 unpaid, June settled in full (6 * 750), so July looks back and stops at June.
    today = date(2025, 7, 20)
    verdict = compute_delinquency(_ledger({6: 4500}, today), today)
    assert verdict.consecutive_unpaid == 0
    assert verdict.must_restrict is False


@pytest.mark.parametrize("threshold, expected", [(3, True), (5, True), (6, False)])
def test_threshold_is_configurable(threshold: int, expected: bool) -> None:
    today = date(2025, 6, 10)
    verdict = compute_delinquency(_ledger({}, today), today, threshold=threshold)
    assert verdict.must_restrict is expected


def test_scan_stops_counting_at_limit() -> None:
    today = date(2025, 12, 1)
    ledger = _ledger({}, today)
    assert count_consecutive_unpaid(ledger, today.month, limit=5) == 5
    assert count_consecutive_unpaid(ledger, today.month, limit=20) == 11


def test_missing_ledger_fails_open() -> None:
    verdict = compute_delinquency(None, date(2025, 6, 10))
    assert verdict.must_restrict is False
    assert verdict.unpaid_months == []
    assert verdict.months_data_for_payment == []


def test_empty_ledger_fails_open() -> None:
    verdict = compute_delinquency(YearLedger(year=2025, months=[]), date(2025, 6, 10))
    assert verdict.must_restrict is False
    assert verdict.unpaid_months == []


def test_missing_month_entries_count_as_unpaid() -> None:
    today = date(2025, 6, 10)
    full = _ledger({m: 750 for m in range(1, 13)}, today)
    # Drop February-June entirely; January stays paid.
    partial = full.model_copy(update={"months": [m for m in full.months if m.month not in (2, 3, 4, 5, 6)]})

    verdict = compute_delinquency(partial, today)
    assert verdict.consecutive_unpaid == 4
    assert verdict.unpaid_months == [2, 3, 4, 5, 6]
    assert verdict.months_data_for_payment == []


def test_january_never_restricts() -> None:
    today = date(2025, 1, 20)
    verdict = compute_delinquency(_ledger({}, today), today)
    assert verdict.must_restrict is False
    assert verdict.consecutive_unpaid == 0
    assert verdict.unpaid_months == [1]


def test_past_year_ledger_lists_arrears_without_restricting() -> None:
    today = date(2025, 6, 10)
    verdict = compute_delinquency(_ledger({}, today, year=2024), today)
    assert verdict.must_restrict is False
    assert verdict.unpaid_months == list(range(1, 13))


def test_future_year_ledger_has_nothing_unpaid() -> None:
    today = date(2025, 6, 10)
    verdict = compute_delinquency(_ledger({}, today, year=2026), today)
    assert verdict.must_restrict is False
    assert verdict.unpaid_months == []


def test_payment_shares_are_incremental_per_month() -> None:
    today = date(2025, 6, 10)
    ledger = _ledger({}, today)
    verdict = compute_delinquency(ledger, today)

    assert [s.balance_cents for s in verdict.months_data_for_payment] == [DUE] * 6
    assert verdict.amount_due_cents == ledger.month(6).balance_cents


def test_payment_shares_start_from_first_unpaid_month() -> None:
    today = date(2025, 4, 10)
    ledger = _ledger({1: 750, 2: 300}, today)
    verdict = compute_delinquency(ledger, today)

    shares = verdict.months_data_for_payment
    assert [s.month for s in shares] == [2, 3, 4]
    assert [s.balance_cents for s in shares] == [45000, 75000, 75000]
    assert shares[0].month_name == "February"
    assert shares[0].total_paid_cents == 30000
    assert verdict.amount_due_cents == ledger.month(4).balance_cents


def test_lump_payment_settles_earlier_months_for_payment_shares() -> None:
    today = date(2025, 6, 10)
    ledger = _ledger({3: 3000}, today)
    verdict = compute_delinquency(ledger, today)

    shares = verdict.months_data_for_payment
    assert [s.month for s in shares] == [4, 5, 6]
    assert [s.balance_cents for s in shares] == [DUE, DUE, DUE]
    assert verdict.amount_due_cents == ledger.month(6).balance_cents == 225000


def test_paying_amount_due_after_lump_payment_posts_to_open_months() -> None:
    today = date(2025, 6, 10)
    ledger = _ledger({3: 3000}, today)
    verdict = compute_delinquency(ledger, today)

    plan = allocate_payment(verdict.amount_due_cents, verdict.months_data_for_payment, year=2025)
    assert [(p.month, p.amount_cents) for p in plan.postings] == [(4, DUE), (5, DUE), (6, DUE)]
    assert plan.advance is None


@pytest.mark.parametrize(
    "payments, last_month, expected",
    [
        ({}, 6, 0),
        ({3: 3000}, 6, 3),
        ({3: 3000, 5: 1500}, 6, 5),
        ({1: 300}, 6, 0),
    ],
    ids=["nothing-paid", "lump-in-march", "later-lump-wins", "partial-only"],
)
def test_last_settled_month(payments: dict[int, int], last_month: int, expected: int) -> None:
    today = date(2025, 6, 10)
    assert last_settled_month(_ledger(payments, today), last_month) == expected
