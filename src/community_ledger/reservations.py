from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Optional

from .errors import ErrorInfo, InvalidAmount, InvalidInterval, InvalidTransition, LedgerError, SlotConflict
from .models import ConflictResult, Reservation, ReservationReview, ReservationStatus, SlotRequest
from .pricing import RateTable, compute_amount_due


logger = logging.getLogger(__name__)


# PENDING -> {APPROVED, REJECTED, CANCELLED}; APPROVED -> CANCELLED; everything else is terminal.
ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    "PENDING": frozenset({"APPROVED", "REJECTED", "CANCELLED"}),
    "APPROVED": frozenset({"CANCELLED"}),
    "REJECTED": frozenset(),
    "CANCELLED": frozenset(),
}


def intervals_overlap(a: SlotRequest, b: SlotRequest) -> bool:
    # Half-open [start, end): back-to-back bookings do not overlap.
    return a.start_time < b.end_time and b.start_time < a.end_time


def validate_interval(slot: SlotRequest) -> None:
    if slot.end_time <= slot.start_time:
        raise InvalidInterval(
            f"end time {slot.end_time.strftime('%H:%M')} must be after start time {slot.start_time.strftime('%H:%M')}"
        )


def check_conflict(candidate: SlotRequest, existing: Iterable[Reservation]) -> ConflictResult:
    """
    Find PENDING/APPROVED reservations for the same amenity and date whose time range overlaps `candidate`.
    """
    validate_interval(candidate)

    conflicting: list[Reservation] = []
    for other in existing:
        if other.amenity != candidate.amenity or other.date != candidate.date:
            continue
        if not other.is_active:
            continue
        if candidate.id and other.id == candidate.id:
            continue
        if other.end_time <= other.start_time:
            logger.warning("Skipping existing reservation id=%s with an invalid interval", other.id or "-")
            continue
        if intervals_overlap(candidate, other):
            conflicting.append(other)

    if conflicting:
        logger.debug(
            "Slot %s %s %s-%s conflicts with %s reservation(s)",
            candidate.amenity,
            candidate.date.isoformat(),
            candidate.start_time.strftime("%H:%M"),
            candidate.end_time.strftime("%H:%M"),
            len(conflicting),
        )
    return ConflictResult(conflict=bool(conflicting), conflicting_with=conflicting)


def can_transition(current: str, new_status: str) -> bool:
    return new_status.upper() in ALLOWED_TRANSITIONS.get(current.upper(), frozenset())


def transition(
    reservation: Reservation,
    new_status: ReservationStatus,
    *,
    today: Optional[date] = None,
) -> Reservation:
    target = new_status.upper()
    if not can_transition(reservation.status, target):
        raise InvalidTransition(f"cannot move reservation from {reservation.status} to {target}")
    if target == "CANCELLED" and today is not None and today >= reservation.date:
        raise InvalidTransition(
            f"reservation on {reservation.date.isoformat()} can only be cancelled before its date"
        )
    return reservation.model_copy(update={"status": target})


def record_payment(reservation: Reservation, amount_cents: int) -> Reservation:
    if amount_cents <= 0:
        raise InvalidAmount(f"payment amount must be greater than 0 (got {amount_cents})")
    if reservation.payment_status == "REFUNDED":
        raise InvalidTransition("cannot take payment on a refunded reservation")

    paid = reservation.amount_paid_cents + amount_cents
    payment_status = "PAID" if paid >= reservation.amount_to_pay_cents else reservation.payment_status
    return reservation.model_copy(update={"amount_paid_cents": paid, "payment_status": payment_status})


def refund(reservation: Reservation) -> Reservation:
    if reservation.payment_status != "PAID":
        raise InvalidTransition(f"only paid reservations can be refunded (status={reservation.payment_status})")
    return reservation.model_copy(update={"payment_status": "REFUNDED"})


def review_reservation(
    request: SlotRequest,
    existing: Iterable[Reservation],
    *,
    rate_table: RateTable,
    walk_in: bool = False,
) -> ReservationReview:
    """
    Validate, conflict-check and price a proposed booking.

    Errors come back on the review instead of being raised, so a form handler can show them next to the
    fields. Walk-ins are approved and paid in full on the spot.
    """
    try:
        result = check_conflict(request, existing)
        amount = compute_amount_due(request.amenity, request.duration_minutes, request.number_of_guests, rate_table)
        if result.conflict:
            raise SlotConflict(
                f"{request.amenity} is already booked on {request.date.isoformat()} for an overlapping time"
            )
    except SlotConflict as e:
        return ReservationReview(
            conflicting_with=result.conflicting_with,
            amount_to_pay_cents=amount,
            error=ErrorInfo.from_exc(e),
        )
    except LedgerError as e:
        logger.info("Rejected reservation request for %s: %s", request.amenity, e)
        return ReservationReview(error=ErrorInfo.from_exc(e))

    fields = request.model_dump()
    if walk_in:
        reservation = Reservation(
            **fields,
            status="APPROVED",
            payment_status="PAID",
            amount_to_pay_cents=amount,
            amount_paid_cents=amount,
        )
    else:
        reservation = Reservation(**fields, amount_to_pay_cents=amount)

    return ReservationReview(accepted=True, amount_to_pay_cents=amount, reservation=reservation)
