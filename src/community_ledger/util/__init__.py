from .dates import minutes_between, month_name, parse_date, parse_time_of_day
from .money import cents_to_money_str, money_to_cents

__all__ = [
    "parse_date",
    "parse_time_of_day",
    "month_name",
    "minutes_between",
    "money_to_cents",
    "cents_to_money_str",
]
