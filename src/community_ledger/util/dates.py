from __future__ import annotations

import calendar
from datetime import date, datetime, time

from dateutil import parser as date_parser


def parse_date(value: str) -> date:
    """
    Parse dates like:
    - "2025-06-10"
    - "06/10/2025"
    - "June 10, 2025"
    """
    if value is None:
        raise ValueError("parse_date: value is None")
    s = value.strip()
    if not s:
        raise ValueError("parse_date: empty string")
    dt = date_parser.parse(s, dayfirst=False, yearfirst=False)
    return dt.date()


def parse_time_of_day(value: str) -> time:
    """
    Parse times like:
    - "15:00"
    - "3:00 PM"
    - "07:30:00"
    """
    if value is None:
        raise ValueError("parse_time_of_day: value is None")
    s = value.strip()
    if not s:
        raise ValueError("parse_time_of_day: empty string")
    dt = date_parser.parse(s, default=datetime(2000, 1, 1))
    return dt.time().replace(microsecond=0)


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month_name: month out of range: {month}")
    return calendar.month_name[month]


def minutes_between(start: time, end: time) -> int:
    # Same-day times only; negative when end is before start.
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
