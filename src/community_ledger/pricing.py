from __future__ import annotations

import logging
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from .amenities import normalize_amenity
from .errors import InvalidAmount
from .util.money import money_to_cents, prorate_cents


logger = logging.getLogger(__name__)


class AmenityRate(BaseModel):
    """
    Pricing rule for one amenity.

    - flat: `base_cents` per booking, whatever the duration.
    - hourly: `base_cents` per hour, prorated by the minute.
    - event: `base_cents` per event up to `event_max_hours`, `extended_cents` for longer bookings.

    Guests above `guest_threshold` add `guest_surcharge_cents` each.
    """

    mode: Literal["flat", "hourly", "event"] = "flat"
    base_cents: int = Field(default=0, ge=0)
    event_max_hours: int = Field(default=0, ge=0)
    extended_cents: int = Field(default=0, ge=0)
    guest_threshold: Optional[int] = Field(default=None, ge=0)
    guest_surcharge_cents: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _parse_money_fields(cls, data: object) -> object:
        # Config files give human amounts ("100.00"); accept those alongside *_cents.
        if not isinstance(data, dict):
            return data
        out = dict(data)
        for key in ("base", "extended", "guest_surcharge"):
            if key in out:
                out[f"{key}_cents"] = money_to_cents(out.pop(key))
        return out


RateTable = Mapping[str, AmenityRate]


# Rates from the community's posted price list.
DEFAULT_RATES: dict[str, AmenityRate] = {
    "GAZEBO": AmenityRate(mode="flat", base_cents=6000),
    "COURT": AmenityRate(mode="hourly", base_cents=10000),
    "PARKING_AREA": AmenityRate(mode="event", base_cents=100000, event_max_hours=15, extended_cents=80000),
}


def default_rate_table() -> dict[str, AmenityRate]:
    return dict(DEFAULT_RATES)


def compute_amount_due(
    amenity: str,
    duration_minutes: int,
    guest_count: int,
    rate_table: RateTable,
) -> int:
    """
    Price one booking in cents from a caller-supplied rate table.

    Amenities missing from the table price at 0; the caller decides whether that is acceptable.
    """
    if duration_minutes < 0:
        raise InvalidAmount(f"duration must not be negative (got {duration_minutes} minutes)")
    if guest_count < 0:
        raise InvalidAmount(f"guest count must not be negative (got {guest_count})")

    slug = normalize_amenity(amenity)
    rate = rate_table.get(slug)
    if rate is None:
        logger.warning("No rate configured for amenity=%s; pricing at 0", slug)
        return 0

    if rate.mode == "flat":
        amount = rate.base_cents
    elif rate.mode == "hourly":
        amount = prorate_cents(rate.base_cents, duration_minutes, 60)
    else:
        if duration_minutes <= rate.event_max_hours * 60:
            amount = rate.base_cents
        else:
            amount = rate.extended_cents

    if rate.guest_threshold is not None and guest_count > rate.guest_threshold:
        amount += (guest_count - rate.guest_threshold) * rate.guest_surcharge_cents

    if amount < 0:
        raise InvalidAmount(f"computed amount is negative for amenity={slug}: {amount}")

    logger.debug(
        "Priced amenity=%s mode=%s minutes=%s guests=%s -> %s cents",
        slug,
        rate.mode,
        duration_minutes,
        guest_count,
        amount,
    )
    return amount
