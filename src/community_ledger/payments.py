from __future__ import annotations

import logging
from typing import Iterable

from .errors import ExcessPayment, InvalidAmount
from .models import AdvanceCredit, MonthDueShare, PaymentPlan, PaymentPosting
from .util.money import cents_to_money_str


logger = logging.getLogger(__name__)


def next_period(year: int, month: int) -> tuple[int, int]:
    if month >= 12:
        return year + 1, 1
    return year, month + 1


def allocate_payment(
    amount_cents: int,
    shares: Iterable[MonthDueShare],
    *,
    year: int,
    apply_advance: bool = False,
) -> PaymentPlan:
    """
    Split one payment across unpaid months, settling the oldest month first.

    Anything left once every share is covered is an excess. It is only accepted when `apply_advance` is set, in
    which case it becomes a credit on the month after the last month paid.
    """
    if amount_cents <= 0:
        raise InvalidAmount(f"payment amount must be greater than 0 (got {amount_cents})")

    ordered = sorted(shares, key=lambda s: s.month)
    remaining = amount_cents
    postings: list[PaymentPosting] = []

    for share in ordered:
        if remaining <= 0:
            break
        portion = min(share.balance_cents, remaining)
        if portion <= 0:
            continue
        postings.append(PaymentPosting(year=year, month=share.month, amount_cents=portion))
        remaining -= portion

    if remaining <= 0:
        return PaymentPlan(postings=postings)

    if not apply_advance:
        raise ExcessPayment(
            f"Payment exceeds the balance by {cents_to_money_str(remaining)}. "
            "Enable 'Apply Advance Payment' to submit an excess amount.",
            excess_cents=remaining,
        )

    if postings:
        source_month = postings[-1].month
    elif ordered:
        source_month = ordered[-1].month
    else:
        # Nothing owed at all: the whole amount is credited to the first month of the year.
        source_month = 0

    credit_year, credit_month = next_period(year, source_month) if source_month else (year, 1)
    logger.info(
        "Applying advance of %s from month=%s to %s-%02d",
        cents_to_money_str(remaining),
        source_month or "-",
        credit_year,
        credit_month,
    )
    return PaymentPlan(
        postings=postings,
        advance=AdvanceCredit(
            year=credit_year,
            month=credit_month,
            amount_cents=remaining,
            source_month=source_month,
        ),
    )
