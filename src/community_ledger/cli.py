from __future__ import annotations

import argparse
import logging
import os
from datetime import date
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from .amenities import KNOWN_AMENITIES, display_name
from .config import AppConfig, load_config
from .errors import ExcessPayment, InvalidAmount
from .logging_config import configure_logging
from .models import MonthlyDueRecord, Reservation, SlotRequest
from .payments import allocate_payment
from .reconcile import reconcile_resident
from .reservations import review_reservation
from .util.dates import parse_date
from .util.money import cents_to_money_str, money_to_cents


logger = logging.getLogger("community_ledger")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="community_ledger")
    p.add_argument(
        "--env-file",
        default=".env",
        help="Path to a dotenv file (default: .env). If missing, env vars must already be set.",
    )
    p.add_argument("--config", default="config.yaml", help="Path to YAML config (default: config.yaml)")

    sub = p.add_subparsers(dest="cmd", required=True)

    ledger = sub.add_parser("ledger", help="Show a resident's 12-month dues ledger and restriction verdict")
    ledger.add_argument("--payments", required=True, help="YAML file with the resident's payment rows")
    ledger.add_argument("--year", type=int, default=0, help="Ledger year (default: the year of --today)")
    ledger.add_argument("--today", default="", help="Evaluate as of this date (YYYY-MM-DD, default: today)")

    allocate = sub.add_parser("allocate", help="Split a payment across unpaid months, oldest first")
    allocate.add_argument("--payments", required=True, help="YAML file with the resident's payment rows")
    allocate.add_argument("--amount", required=True, help="Amount being paid (e.g. 1500 or 1,500.00)")
    allocate.add_argument("--year", type=int, default=0, help="Ledger year (default: the year of --today)")
    allocate.add_argument("--today", default="", help="Evaluate as of this date (YYYY-MM-DD, default: today)")
    allocate.add_argument(
        "--apply-advance",
        action="store_true",
        help="Credit any excess to the month after the last month paid instead of rejecting the payment.",
    )

    slot = sub.add_parser("check-slot", help="Check an amenity booking for conflicts and price it")
    slot.add_argument("--reservations", default="", help="YAML file with existing reservations for the amenity")
    slot.add_argument("--amenity", required=True, help="Amenity slug (e.g. COURT, GAZEBO, PARKING_AREA)")
    slot.add_argument("--date", required=True, help="Reservation date (YYYY-MM-DD)")
    slot.add_argument("--start", required=True, help="Start time (e.g. 15:00 or 3:00 PM)")
    slot.add_argument("--end", required=True, help="End time (e.g. 17:00 or 5:00 PM)")
    slot.add_argument("--guests", type=int, default=1, help="Number of guests (default: 1)")
    slot.add_argument("--walk-in", action="store_true", help="Walk-in booking: approved and paid on the spot")

    sub.add_parser("list-amenities", help="List known amenities and their configured rates")

    return p


def _resolve_today(value: str) -> date:
    return parse_date(value) if value else date.today()


def _read_yaml(path: str) -> object:
    p = Path(path)
    if not p.exists():
        raise SystemExit(f"File not found: {path}")
    return yaml.safe_load(p.read_text(encoding="utf-8"))


def load_payment_rows(path: str, *, year: int) -> tuple[Optional[str], list[MonthlyDueRecord]]:
    """
    Read payment rows from YAML. Either a bare list of rows, or a mapping with `resident_id` and `payments`.

    Each row needs `month` and `amount` (human amount); `year` defaults to the ledger year.
    """
    raw = _read_yaml(path) or []
    resident_id: Optional[str] = None
    if isinstance(raw, dict):
        resident_id = str(raw.get("resident_id") or "") or None
        raw = raw.get("payments") or []
    if not isinstance(raw, list):
        raise SystemExit(f"{path}: expected a list of payment rows")

    records: list[MonthlyDueRecord] = []
    for row in raw:
        if not isinstance(row, dict):
            raise SystemExit(f"{path}: each payment row must be a mapping (got {row!r})")
        try:
            records.append(
                MonthlyDueRecord(
                    resident_id=resident_id or "",
                    year=int(row.get("year") or year),
                    month=int(row["month"]),
                    total_paid_cents=money_to_cents(row.get("amount", 0)),
                    status=row.get("status"),
                )
            )
        except KeyError as e:
            raise SystemExit(f"{path}: payment row is missing {e} ({row!r})") from None
        except (TypeError, ValueError) as e:
            raise SystemExit(f"{path}: invalid payment row {row!r}: {e}") from None
    return resident_id, records


def load_reservation_rows(path: str) -> list[Reservation]:
    if not path:
        return []
    raw = _read_yaml(path) or []
    if not isinstance(raw, list):
        raise SystemExit(f"{path}: expected a list of reservations")
    reservations: list[Reservation] = []
    for row in raw:
        try:
            reservations.append(Reservation.model_validate(row))
        except ValueError as e:
            raise SystemExit(f"{path}: invalid reservation {row!r}: {e}") from None
    return reservations


def _print_ledger(report) -> None:
    ledger = report.ledger
    print(f"Year {ledger.year}" + (f" (resident {ledger.resident_id})" if ledger.resident_id else ""))
    for m in ledger.months:
        flags = []
        if m.is_paid:
            flags.append("paid")
        if m.is_overdue:
            flags.append("overdue")
        if m.is_current_month:
            flags.append("current")
        print(
            f"- {m.month_name:<9} required={cents_to_money_str(m.total_required_cents)} "
            f"paid={cents_to_money_str(m.total_paid_cents)} "
            f"balance={cents_to_money_str(m.balance_cents)} "
            f"advance={cents_to_money_str(m.advance_payment_cents)}"
            + (f" [{', '.join(flags)}]" if flags else "")
        )

    s = report.summary
    print()
    print(f"Outstanding: {cents_to_money_str(s.outstanding_cents)}")
    print(f"Overdue months: {s.overdue_months}" + (" (should archive)" if s.should_archive else ""))

    v = report.verdict
    print(f"Unpaid months: {', '.join(str(m) for m in v.unpaid_months) or '-'}")
    print(f"Restricted: {'yes' if v.must_restrict else 'no'} ({v.consecutive_unpaid} consecutive unpaid)")


def _cmd_ledger(cfg: AppConfig, args: argparse.Namespace) -> int:
    today = _resolve_today(args.today)
    year = args.year or today.year
    resident_id, records = load_payment_rows(args.payments, year=year)

    report = reconcile_resident(records, year, today=today, settings=cfg.dues, resident_id=resident_id)
    if report.error:
        print(f"❌ {report.error.code}: {report.error.message}")
        return 1
    _print_ledger(report)
    return 0


def _cmd_allocate(cfg: AppConfig, args: argparse.Namespace) -> int:
    try:
        amount_cents = money_to_cents(args.amount)
    except ValueError as e:
        print(f"❌ Invalid amount: {e}")
        return 2

    today = _resolve_today(args.today)
    year = args.year or today.year
    resident_id, records = load_payment_rows(args.payments, year=year)

    report = reconcile_resident(records, year, today=today, settings=cfg.dues, resident_id=resident_id)
    if report.error:
        print(f"❌ {report.error.code}: {report.error.message}")
        return 1

    try:
        plan = allocate_payment(
            amount_cents,
            report.verdict.months_data_for_payment,
            year=year,
            apply_advance=args.apply_advance,
        )
    except (ExcessPayment, InvalidAmount) as e:
        print(f"❌ {e.code}: {e}")
        return 1

    print(f"Allocation of {cents_to_money_str(plan.total_cents)}:")
    for posting in plan.postings:
        print(f"- {posting.year}-{posting.month:02d}: {cents_to_money_str(posting.amount_cents)}")
    if plan.advance:
        print(
            f"- {plan.advance.year}-{plan.advance.month:02d}: {cents_to_money_str(plan.advance.amount_cents)} (advance)"
        )
    return 0


def _cmd_check_slot(cfg: AppConfig, args: argparse.Namespace) -> int:
    try:
        request = SlotRequest(
            amenity=args.amenity,
            date=args.date,
            start_time=args.start,
            end_time=args.end,
            number_of_guests=args.guests,
        )
    except ValueError as e:
        print(f"❌ Invalid booking request: {e}")
        return 2
    existing = load_reservation_rows(args.reservations)
    review = review_reservation(request, existing, rate_table=cfg.reservations.rates, walk_in=args.walk_in)

    if review.error:
        print(f"❌ {review.error.code}: {review.error.message}")
        for other in review.conflicting_with:
            print(
                f"  - {other.id or '(no id)'} {other.start_time.strftime('%H:%M')}-{other.end_time.strftime('%H:%M')} "
                f"{other.status}"
            )
        return 1

    r = review.reservation
    print(
        f"✅ {display_name(r.amenity)} available on {r.date.isoformat()} "
        f"{r.start_time.strftime('%H:%M')}-{r.end_time.strftime('%H:%M')}"
    )
    print(f"Amount to pay: {cents_to_money_str(review.amount_to_pay_cents)} (status {r.status}, payment {r.payment_status})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    env_path = Path(args.env_file)
    if env_path.exists():
        load_dotenv(env_path)

    # Default logging: can be overridden once config is loaded.
    try:
        configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))
    except ValueError:
        # load_config reports the bad level below
        configure_logging()

    if args.cmd == "list-amenities":
        cfg = load_config(args.config)
        for slug in sorted(set(KNOWN_AMENITIES) | set(cfg.reservations.rates)):
            rate = cfg.reservations.rates.get(slug)
            pricing = f"{rate.mode} {cents_to_money_str(rate.base_cents)}" if rate else "no rate"
            print(f"{slug}\t{display_name(slug)}\t{pricing}")
        return 0

    cfg = load_config(args.config)
    configure_logging(level=cfg.logging.level, file_path=cfg.logging.file_path or None)
    logger.debug("Running %s", args.cmd)

    if args.cmd == "ledger":
        return _cmd_ledger(cfg, args)
    if args.cmd == "allocate":
        return _cmd_allocate(cfg, args)
    if args.cmd == "check-slot":
        return _cmd_check_slot(cfg, args)

    raise AssertionError("Unhandled command")


if __name__ == "__main__":
    raise SystemExit(main())
