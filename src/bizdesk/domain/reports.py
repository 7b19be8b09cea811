"""Substitution and sales reports.

Substitution reports count the periods each substitute covered in a month or
on a day, with hours taken from the school's time slots. Sales reports total
every non-draft invoice and break the last few weeks down by day.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dateutil import parser as date_parser

from bizdesk.database.base import Database
from bizdesk.domain.entities import (
    Invoice,
    SalesReport,
    SubstitutionRecord,
    SubstitutionReport,
    TeacherStats,
)
from bizdesk.domain.errors import ValidationError, log_failure
from bizdesk.domain.salary import parse_month

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_MINUTES = 45
SALES_WINDOW_DAYS = 30
DRAFT = "draft"

_SLOT_DAY = datetime(2000, 1, 1)


def period_minutes(period: str, time_slots: Sequence[str]) -> int:
    """Length of a period in minutes, read from its ``start-end`` time slot.

    Period ``"3"`` uses the third slot. Periods without a readable slot last
    45 minutes. An end earlier than the start is read on a 12-hour clock
    (``12:30-1:05`` is 35 minutes).
    """
    try:
        index = int(period) - 1
    except ValueError:
        return DEFAULT_PERIOD_MINUTES
    if not 0 <= index < len(time_slots) or not time_slots[index]:
        return DEFAULT_PERIOD_MINUTES

    start_text, separator, end_text = time_slots[index].partition("-")
    if not separator:
        return DEFAULT_PERIOD_MINUTES
    try:
        start = date_parser.parse(start_text.strip(), default=_SLOT_DAY)
        end = date_parser.parse(end_text.strip(), default=_SLOT_DAY)
    except (ValueError, OverflowError):
        return DEFAULT_PERIOD_MINUTES

    minutes = int((end - start).total_seconds() // 60)
    if minutes < 0:
        minutes += 12 * 60
    return minutes


def filter_substitutions(
    records: Iterable[SubstitutionRecord],
    month: Optional[str] = None,
    on_date: Optional[date] = None,
) -> list[SubstitutionRecord]:
    """Keep records in ``month`` (``YYYY-MM``) or on ``on_date``.

    Raises:
        ValidationError: If both filters are given or the month is malformed
    """
    if month and on_date:
        raise ValidationError("Filter by month or by date, not both")
    records = list(records)
    if month:
        year, month_number = parse_month(month)
        return [r for r in records if (r.date.year, r.date.month) == (year, month_number)]
    if on_date is not None:
        return [r for r in records if r.date == on_date]
    return records


def teacher_stats(
    records: Iterable[SubstitutionRecord], time_slots: Sequence[str]
) -> list[TeacherStats]:
    """Periods, hours and distinct days covered per substitute, busiest first."""
    periods: dict[str, int] = {}
    minutes: dict[str, int] = {}
    dates: dict[str, set[date]] = {}
    for record in records:
        name = record.substitute_teacher
        periods[name] = periods.get(name, 0) + 1
        minutes[name] = minutes.get(name, 0) + period_minutes(record.period, time_slots)
        dates.setdefault(name, set()).add(record.date)

    stats = [
        TeacherStats(
            teacher=name,
            periods=count,
            hours=(Decimal(minutes[name]) / 60).quantize(Decimal("0.01")),
            days=len(dates[name]),
        )
        for name, count in periods.items()
    ]
    return sorted(stats, key=lambda s: s.periods, reverse=True)


def substitutions_by_date(
    records: Iterable[SubstitutionRecord],
) -> list[tuple[date, tuple[SubstitutionRecord, ...]]]:
    """Group records by date, newest date first."""
    grouped: dict[date, list[SubstitutionRecord]] = {}
    for record in records:
        grouped.setdefault(record.date, []).append(record)
    return [(day, tuple(grouped[day])) for day in sorted(grouped, reverse=True)]


def build_substitution_report(
    records: Iterable[SubstitutionRecord],
    time_slots: Sequence[str],
    month: Optional[str] = None,
    on_date: Optional[date] = None,
) -> SubstitutionReport:
    """Filter records and group them by date and by substitute."""
    selected = filter_substitutions(records, month=month, on_date=on_date)
    return SubstitutionReport(
        records=tuple(selected),
        by_date=tuple(substitutions_by_date(selected)),
        teacher_stats=tuple(teacher_stats(selected, time_slots)),
    )


def build_sales_report(
    invoices: Iterable[Invoice], today: date, days: int = SALES_WINDOW_DAYS
) -> SalesReport:
    """Totals over every non-draft invoice, plus daily sales for ``days`` days up to ``today``."""
    if days < 1:
        raise ValidationError("The sales window must be at least one day")
    counted = [inv for inv in invoices if (inv.status or "").lower() != DRAFT]

    daily: dict[date, Decimal] = {}
    for inv in counted:
        daily[inv.invoice_date] = daily.get(inv.invoice_date, Decimal(0)) + inv.grand_total
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    return SalesReport(
        total_sales=sum((inv.grand_total for inv in counted), Decimal(0)),
        total_tax=sum((inv.total_tax_amount for inv in counted), Decimal(0)),
        invoice_count=len(counted),
        unique_customers=len({inv.customer_id for inv in counted if inv.customer_id}),
        daily_sales=tuple((day, daily.get(day, Decimal(0))) for day in window),
    )


class ReportService:
    """Service for building substitution and sales reports."""

    def __init__(self, db: Database, user_id: Optional[str]):
        """Initialize report service.

        Args:
            db: Database instance
            user_id: Authenticated user, or None when nobody is signed in
        """
        self.db = db
        self.user_id = user_id

    def substitution_report(
        self, month: Optional[str] = None, on_date: Optional[date] = None
    ) -> SubstitutionReport:
        """Report on stored substitutions, optionally for one month or day."""
        if not self.user_id:
            return build_substitution_report([], (), month=month, on_date=on_date)
        with log_failure(logger, "building substitution report"):
            records = self.db.load_substitutions(self.user_id)
            settings = self.db.load_settings(self.user_id)
        return build_substitution_report(
            records, settings.time_slots, month=month, on_date=on_date
        )

    def sales_report(
        self, today: Optional[date] = None, days: int = SALES_WINDOW_DAYS
    ) -> SalesReport:
        """Report on stored invoices."""
        today = today or date.today()
        if not self.user_id:
            return build_sales_report([], today, days)
        with log_failure(logger, "building sales report"):
            invoices = self.db.list_invoices(self.user_id)
        return build_sales_report(invoices, today, days)
