from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping


_AMENITY_SLUG_RE = re.compile(r"^[A-Z0-9_]+$")


@dataclass(frozen=True)
class AmenityInfo:
    slug: str
    display_name: str


# Amenities the community ships with. Unknown slugs are still allowed as long as they normalize cleanly.
KNOWN_AMENITIES: Mapping[str, AmenityInfo] = {
    "COURT": AmenityInfo(slug="COURT", display_name="Basketball Court"),
    "GAZEBO": AmenityInfo(slug="GAZEBO", display_name="Gazebo"),
    "PARKING_AREA": AmenityInfo(slug="PARKING_AREA", display_name="Parking Area"),
    "CLUBHOUSE": AmenityInfo(slug="CLUBHOUSE", display_name="Clubhouse"),
}


def normalize_amenity(amenity: str) -> str:
    """
    "parking area", "Parking-Area" and "PARKING_AREA" all map to "PARKING_AREA".
    """
    s = (amenity or "").strip().upper()
    s = re.sub(r"[\s\-]+", "_", s)
    if not s:
        raise ValueError("amenity is required")
    if not _AMENITY_SLUG_RE.match(s):
        raise ValueError(f"amenity must be a slug like 'COURT' (letters, numbers, underscore): {amenity!r}")
    return s


def is_known_amenity(amenity: str) -> bool:
    try:
        return normalize_amenity(amenity) in KNOWN_AMENITIES
    except ValueError:
        return False


def display_name(amenity: str) -> str:
    slug = normalize_amenity(amenity)
    info = KNOWN_AMENITIES.get(slug)
    return info.display_name if info else slug.replace("_", " ").title()
