from __future__ import annotations

from datetime import date as _date, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .amenities import normalize_amenity
from .errors import ErrorInfo
from .util.dates import minutes_between, parse_date, parse_time_of_day


ReservationStatus = Literal["PENDING", "APPROVED", "REJECTED", "CANCELLED"]
PaymentStatus = Literal["PENDING", "PAID", "REFUNDED"]
UserType = Literal["RESIDENT", "TENANT", "VISITOR"]

# Only these hold a slot; REJECTED/CANCELLED free it immediately.
ACTIVE_STATUSES = frozenset({"PENDING", "APPROVED"})


def _upper(value: object) -> object:
    # The web layer historically sent both "pending" and "PENDING".
    if isinstance(value, str):
        return value.strip().upper()
    return value


class MonthlyDueRecord(BaseModel):
    resident_id: str = ""
    year: int
    month: int = Field(ge=1, le=12)
    total_paid_cents: int = 0

    # Per-month override of the configured base due (no prorating otherwise).
    required_amount_cents: Optional[int] = None

    # Review status of the latest posting (PENDING/APPROVED/REJECTED), display only.
    status: Optional[str] = None


class MonthLedgerEntry(BaseModel):
    month: int
    month_name: str
    required_amount_cents: int
    previous_balance_cents: int
    total_required_cents: int
    total_paid_cents: int
    balance_cents: int
    advance_payment_cents: int
    is_paid: bool
    is_overdue: bool
    is_current_month: bool = False
    is_future_month: bool = False
    status: Optional[str] = None


class YearLedger(BaseModel):
    resident_id: Optional[str] = None
    year: int
    months: list[MonthLedgerEntry] = Field(default_factory=list)

    def month(self, month: int) -> Optional[MonthLedgerEntry]:
        return next((m for m in self.months if m.month == month), None)


class MonthDueShare(BaseModel):
    """
    One unpaid month as presented to a payer.

    `balance_cents` is the amount this month adds to the carry-forward chain on its own, so paying the shares
    oldest-first settles the chain month by month.
    """

    month: int
    month_name: str
    required_amount_cents: int
    total_paid_cents: int
    balance_cents: int
    advance_payment_cents: int = 0
    is_paid: bool = False
    is_overdue: bool = False
    status: Optional[str] = None


class DelinquencyVerdict(BaseModel):
    must_restrict: bool = False
    consecutive_unpaid: int = 0
    unpaid_months: list[int] = Field(default_factory=list)
    months_data_for_payment: list[MonthDueShare] = Field(default_factory=list)

    @property
    def amount_due_cents(self) -> int:
        return sum(s.balance_cents for s in self.months_data_for_payment)


class LedgerSummary(BaseModel):
    outstanding_cents: int = 0
    total_advance_cents: int = 0
    overdue_months: int = 0
    should_archive: bool = False


class PaymentPosting(BaseModel):
    year: int
    month: int
    amount_cents: int


class AdvanceCredit(BaseModel):
    year: int
    month: int
    amount_cents: int
    source_month: int


class PaymentPlan(BaseModel):
    postings: list[PaymentPosting] = Field(default_factory=list)
    advance: Optional[AdvanceCredit] = None

    @property
    def total_cents(self) -> int:
        total = sum(p.amount_cents for p in self.postings)
        if self.advance:
            total += self.advance.amount_cents
        return total


class DuesReport(BaseModel):
    year: int
    resident_id: Optional[str] = None
    ledger: Optional[YearLedger] = None
    verdict: DelinquencyVerdict = Field(default_factory=DelinquencyVerdict)
    summary: LedgerSummary = Field(default_factory=LedgerSummary)
    error: Optional[ErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SlotRequest(BaseModel):
    amenity: str
    date: _date
    start_time: time
    end_time: time
    number_of_guests: int = Field(default=1, ge=0)

    # Optional metadata carried onto the created reservation
    id: Optional[str] = None
    full_name: str = ""
    user_type: UserType = "RESIDENT"
    purpose: Optional[str] = None
    payment_method: Optional[str] = None

    @field_validator("amenity", mode="before")
    @classmethod
    def _normalize_amenity(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_amenity(value)
        return value

    @field_validator("user_type", mode="before")
    @classmethod
    def _normalize_user_type(cls, value: object) -> object:
        return _upper(value)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_date(value)
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_time_of_day(value)
        return value

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start_time, self.end_time)


class Reservation(SlotRequest):
    status: ReservationStatus = "PENDING"
    payment_status: PaymentStatus = "PENDING"
    amount_to_pay_cents: int = 0
    amount_paid_cents: int = 0

    @field_validator("status", "payment_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        return _upper(value)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class ConflictResult(BaseModel):
    conflict: bool = False
    conflicting_with: list[Reservation] = Field(default_factory=list)


class ReservationReview(BaseModel):
    accepted: bool = False
    conflicting_with: list[Reservation] = Field(default_factory=list)
    amount_to_pay_cents: int = 0
    reservation: Optional[Reservation] = None
    error: Optional[ErrorInfo] = None
