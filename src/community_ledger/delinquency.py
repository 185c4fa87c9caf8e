from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from .ledger import elapsed_cutoff
from .models import DelinquencyVerdict, MonthDueShare, MonthLedgerEntry, YearLedger
from .util.dates import month_name


logger = logging.getLogger(__name__)


DEFAULT_RESTRICT_AFTER_MONTHS = 5


def _is_unpaid(entry: Optional[MonthLedgerEntry]) -> bool:
    # A month with no ledger entry counts as unpaid.
    return entry is None or entry.balance_cents > 0


def count_consecutive_unpaid(ledger: YearLedger, current_month: int, *, limit: int) -> int:
    """
    Count unpaid months walking backwards from the month before `current_month`, stopping at the first paid
    month or once `limit` is reached.
    """
    count = 0
    for month in range(current_month - 1, 0, -1):
        if count >= limit:
            break
        if _is_unpaid(ledger.month(month)):
            count += 1
        else:
            break
    return count


def last_settled_month(ledger: YearLedger, last_month: int) -> int:
    """
    Latest month up to `last_month` whose carry-forward balance is zero, or 0 when there is none.

    The balance folds in every earlier month, so a zero there means the year is settled through that month.
    """
    for month in range(last_month, 0, -1):
        entry = ledger.month(month)
        if entry is not None and entry.balance_cents == 0:
            return month
    return 0


def _shares_for_payment(ledger: YearLedger, unpaid_months: list[int]) -> list[MonthDueShare]:
    # unpaid_months begins right after a zero-balance month or at January, so the running balance starts at 0.
    previous_balance = 0
    shares: list[MonthDueShare] = []
    for month in unpaid_months:
        entry = ledger.month(month)
        if entry is None:
            continue
        incremental = entry.balance_cents - previous_balance
        previous_balance = entry.balance_cents
        shares.append(
            MonthDueShare(
                month=month,
                month_name=entry.month_name or month_name(month),
                required_amount_cents=entry.required_amount_cents,
                total_paid_cents=entry.total_paid_cents,
                balance_cents=max(0, incremental),
                advance_payment_cents=entry.advance_payment_cents,
                is_paid=entry.is_paid,
                is_overdue=entry.is_overdue,
                status=entry.status,
            )
        )
    return shares


def compute_delinquency(
    ledger: Optional[YearLedger],
    today: date,
    *,
    threshold: int = DEFAULT_RESTRICT_AFTER_MONTHS,
) -> DelinquencyVerdict:
    """
    Decide whether a resident must settle dues before using the system.

    Missing data never blocks anyone: no ledger (or an empty one) yields an unrestricted verdict.
    """
    if ledger is None or not ledger.months:
        logger.debug("No ledger data; delinquency check fails open")
        return DelinquencyVerdict()

    cutoff = elapsed_cutoff(ledger.year, today)
    last_month = min(cutoff, 12)
    settled = last_settled_month(ledger, last_month)
    unpaid_months = [m for m in range(settled + 1, last_month + 1) if _is_unpaid(ledger.month(m))]
    shares = _shares_for_payment(ledger, unpaid_months)

    if ledger.year != today.year:
        # The restriction gate only looks at the current year.
        return DelinquencyVerdict(unpaid_months=unpaid_months, months_data_for_payment=shares)

    if today.month == 1:
        logger.debug("January: no earlier months in year=%s; prior-year arrears are not considered", ledger.year)

    consecutive = count_consecutive_unpaid(ledger, today.month, limit=threshold)
    must_restrict = consecutive >= threshold
    if must_restrict:
        logger.info(
            "Resident %s has %s consecutive unpaid months before %s; restricting",
            ledger.resident_id or "-",
            consecutive,
            month_name(today.month),
        )

    return DelinquencyVerdict(
        must_restrict=must_restrict,
        consecutive_unpaid=consecutive,
        unpaid_months=unpaid_months,
        months_data_for_payment=shares,
    )
