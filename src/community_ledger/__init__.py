from .delinquency import compute_delinquency
from .errors import ExcessPayment, InvalidAmount, InvalidInterval, InvalidTransition, LedgerError, SlotConflict
from .ledger import compute_year_ledger, summarize_ledger
from .payments import allocate_payment
from .pricing import compute_amount_due
from .reconcile import reconcile_resident
from .reservations import check_conflict, review_reservation, transition

__all__ = [
    "compute_year_ledger",
    "compute_delinquency",
    "summarize_ledger",
    "allocate_payment",
    "reconcile_resident",
    "check_conflict",
    "compute_amount_due",
    "review_reservation",
    "transition",
    "LedgerError",
    "InvalidInterval",
    "InvalidAmount",
    "InvalidTransition",
    "ExcessPayment",
    "SlotConflict",
]
