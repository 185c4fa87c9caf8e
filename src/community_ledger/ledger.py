from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from .errors import InvalidAmount
from .models import LedgerSummary, MonthLedgerEntry, MonthlyDueRecord, YearLedger
from .util.dates import month_name


logger = logging.getLogger(__name__)


DEFAULT_MONTHLY_DUE_CENTS = 75000


def elapsed_cutoff(year: int, today: date) -> int:
    """
    Month number that counts as "current" for `year` as of `today`.

    Past years are fully elapsed (13), future years have not started (0).
    """
    if year < today.year:
        return 13
    if year > today.year:
        return 0
    return today.month


def _collect_month_totals(
    records: Iterable[MonthlyDueRecord],
    year: int,
) -> tuple[dict[int, int], dict[int, int], dict[int, Optional[str]]]:
    paid: dict[int, int] = defaultdict(int)
    required: dict[int, int] = {}
    status: dict[int, Optional[str]] = {}

    for rec in records:
        if rec.year != year:
            logger.warning(
                "Ignoring monthly due record for year=%s month=%s while computing year=%s",
                rec.year,
                rec.month,
                year,
            )
            continue
        if rec.total_paid_cents < 0:
            raise InvalidAmount(f"total paid must not be negative (month={rec.month}, got {rec.total_paid_cents})")
        if rec.required_amount_cents is not None:
            if rec.required_amount_cents < 0:
                raise InvalidAmount(
                    f"required amount must not be negative (month={rec.month}, got {rec.required_amount_cents})"
                )
            required[rec.month] = rec.required_amount_cents

        paid[rec.month] += rec.total_paid_cents
        # Records arrive oldest first; the last status wins.
        if rec.status:
            status[rec.month] = rec.status

    return paid, required, status


def compute_year_ledger(
    records: Iterable[MonthlyDueRecord],
    year: int,
    *,
    today: date,
    monthly_due_cents: int = DEFAULT_MONTHLY_DUE_CENTS,
    resident_id: Optional[str] = None,
) -> YearLedger:
    """
    Fold a year's payments into a 12-month carry-forward ledger.

    Each month owes its base due plus the previous month's unpaid balance. Every later month depends on every
    earlier one, so the whole year is recomputed from January on each call.
    """
    if monthly_due_cents < 0:
        raise InvalidAmount(f"monthly due must not be negative (got {monthly_due_cents})")

    paid, required, status = _collect_month_totals(records, year)
    cutoff = elapsed_cutoff(year, today)

    months: list[MonthLedgerEntry] = []
    previous_balance = 0
    for month in range(1, 13):
        required_amount = required.get(month, monthly_due_cents)
        total_paid = paid.get(month, 0)
        total_required = required_amount + previous_balance
        balance = max(0, total_required - total_paid)
        advance = max(0, total_paid - total_required)

        months.append(
            MonthLedgerEntry(
                month=month,
                month_name=month_name(month),
                required_amount_cents=required_amount,
                previous_balance_cents=previous_balance,
                total_required_cents=total_required,
                total_paid_cents=total_paid,
                balance_cents=balance,
                advance_payment_cents=advance,
                is_paid=balance == 0 and total_required > 0,
                is_overdue=balance > 0 and month < cutoff,
                is_current_month=month == cutoff,
                is_future_month=month > cutoff,
                status=status.get(month),
            )
        )
        previous_balance = balance

    logger.debug(
        "Computed ledger resident=%s year=%s closing_balance=%s",
        resident_id or "-",
        year,
        previous_balance,
    )
    return YearLedger(resident_id=resident_id, year=year, months=months)


def summarize_ledger(
    ledger: Optional[YearLedger],
    today: date,
    *,
    archive_after_months: int = 6,
) -> LedgerSummary:
    if ledger is None or not ledger.months:
        return LedgerSummary()

    cutoff = elapsed_cutoff(ledger.year, today)
    elapsed = [m for m in ledger.months if m.month <= cutoff]

    # Carry-forward already accumulates, so the latest elapsed month holds everything owed so far.
    outstanding = elapsed[-1].balance_cents if elapsed else 0
    overdue = sum(1 for m in ledger.months if m.is_overdue)

    return LedgerSummary(
        outstanding_cents=outstanding,
        total_advance_cents=sum(m.advance_payment_cents for m in ledger.months),
        overdue_months=overdue,
        should_archive=overdue >= archive_after_months,
    )
