from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from .config import DuesConfig
from .delinquency import compute_delinquency
from .errors import ErrorInfo, LedgerError
from .ledger import compute_year_ledger, summarize_ledger
from .models import DuesReport, MonthlyDueRecord


logger = logging.getLogger(__name__)


def reconcile_resident(
    records: Optional[Iterable[MonthlyDueRecord]],
    year: int,
    *,
    today: date,
    settings: Optional[DuesConfig] = None,
    resident_id: Optional[str] = None,
) -> DuesReport:
    """
    Ledger, delinquency verdict and summary for one resident/year in a single call.

    `records=None` means the resident (or their dues data) could not be found; that yields an empty report that
    never restricts. Invalid amounts come back as `report.error` rather than raising.
    """
    settings = settings or DuesConfig()

    if records is None:
        logger.warning("No dues data for resident=%s year=%s; not restricting", resident_id or "-", year)
        return DuesReport(year=year, resident_id=resident_id)

    try:
        ledger = compute_year_ledger(
            records,
            year,
            today=today,
            monthly_due_cents=settings.monthly_due_cents,
            resident_id=resident_id,
        )
    except LedgerError as e:
        logger.info("Cannot reconcile resident=%s year=%s: %s", resident_id or "-", year, e)
        return DuesReport(year=year, resident_id=resident_id, error=ErrorInfo.from_exc(e))

    return DuesReport(
        year=year,
        resident_id=resident_id,
        ledger=ledger,
        verdict=compute_delinquency(ledger, today, threshold=settings.restrict_after_months),
        summary=summarize_ledger(ledger, today, archive_after_months=settings.archive_after_months),
    )
