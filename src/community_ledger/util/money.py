from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union


DEFAULT_CURRENCY_SYMBOL = "₱"


def money_to_cents(value: Union[str, int, float, Decimal]) -> int:
    """
    Parse values like:
    - "750"
    - "₱1,000.00"
    - "$0.37"
    - "(12.34)" -> -1234

    Plain numbers are taken as whole currency units (750 -> 75000 cents).
    """
    if value is None:
        raise ValueError("money_to_cents: value is None")
    if isinstance(value, bool):
        raise ValueError("money_to_cents: booleans are not amounts")

    if isinstance(value, (int, float, Decimal)):
        dec = Decimal(str(value))
    else:
        s = value.strip()
        if not s:
            raise ValueError("money_to_cents: empty string")

        # Remove currency symbols/spaces/commas
        for symbol in (DEFAULT_CURRENCY_SYMBOL, "$", "PHP", ","):
            s = s.replace(symbol, "")
        s = s.strip()

        # Handle parentheses as negative
        if s.startswith("(") and s.endswith(")"):
            s = "-" + s[1:-1].strip()
        try:
            dec = Decimal(s)
        except InvalidOperation:
            raise ValueError(f"money_to_cents: not an amount: {value!r}") from None

    if not dec.is_finite():
        raise ValueError(f"money_to_cents: not an amount: {value!r}")
    dec = dec.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(dec * 100)


def cents_to_money_str(cents: int, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    dec = (Decimal(cents) / 100).quantize(Decimal("0.01"))
    if dec < 0:
        return f"-{symbol}{-dec:,.2f}"
    return f"{symbol}{dec:,.2f}"


def prorate_cents(cents: int, numerator: int, denominator: int) -> int:
    """Scale `cents` by numerator/denominator, rounding half-up to the cent."""
    if denominator <= 0:
        raise ValueError("prorate_cents: denominator must be positive")
    dec = (Decimal(cents) * numerator / denominator).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(dec)
