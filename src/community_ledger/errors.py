from __future__ import annotations

from pydantic import BaseModel


class LedgerError(ValueError):
    """Base class for input-validation failures raised by the engine."""

    code = "LedgerError"


class InvalidInterval(LedgerError):
    code = "InvalidInterval"


class InvalidAmount(LedgerError):
    code = "InvalidAmount"


class InvalidTransition(LedgerError):
    code = "InvalidTransition"


class ExcessPayment(LedgerError):
    code = "ExcessPayment"

    def __init__(self, message: str, excess_cents: int) -> None:
        super().__init__(message)
        self.excess_cents = excess_cents


class SlotConflict(LedgerError):
    code = "SlotConflict"


class ErrorInfo(BaseModel):
    code: str
    message: str

    @classmethod
    def from_exc(cls, exc: LedgerError) -> "ErrorInfo":
        return cls(code=exc.code, message=str(exc))
