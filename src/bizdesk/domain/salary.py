"""Monthly salary and attendance calculations."""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from bizdesk.domain.entities import AttendanceRecord, Staff
from bizdesk.domain.errors import ValidationError

HALF = Decimal("0.5")


@dataclass(frozen=True)
class SalaryCalculation:
    """Attendance counts and pay for one staff member and month."""

    present_days: int
    half_days: int
    absent_days: int
    total_salary: Decimal

    @property
    def total_days(self) -> int:
        return self.present_days + self.half_days + self.absent_days


def parse_month(month_year: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into ``(year, month)``."""
    try:
        year_text, month_text = month_year.strip().split("-")
        year, month = int(year_text), int(month_text)
    except ValueError:
        raise ValidationError(f"Invalid month '{month_year}'. Use YYYY-MM")
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month '{month_year}'. Use YYYY-MM")
    return year, month


def calculate_monthly_salary(
    staff: Staff, attendance: Iterable[AttendanceRecord], month_year: str
) -> SalaryCalculation:
    """Work out a month's pay from daily attendance.

    Every calendar day of the month counts. A day without a record is absent,
    a half day pays half the daily wage.
    """
    year, month = parse_month(month_year)
    days_in_month = calendar.monthrange(year, month)[1]

    statuses = {
        record.date: record.status
        for record in attendance
        if record.staff_id == staff.id
        and record.date.year == year
        and record.date.month == month
    }

    present = half = absent = 0
    for day in range(1, days_in_month + 1):
        status = statuses.get(date(year, month, day), "absent")
        if status == "present":
            present += 1
        elif status == "half-day":
            half += 1
        else:
            absent += 1

    total = staff.daily_wage * present + staff.daily_wage * half * HALF
    return SalaryCalculation(
        present_days=present, half_days=half, absent_days=absent, total_salary=total
    )


def attendance_percentage(present_days: int, half_days: int, total_days: int) -> Decimal:
    """Percentage of days worked, counting half days as half."""
    if total_days <= 0:
        return Decimal(0)
    effective = Decimal(present_days) + Decimal(half_days) * HALF
    return effective / Decimal(total_days) * 100


def format_currency(amount: Decimal) -> str:
    """Format an amount in rupees with Indian digit grouping, e.g. ``₹1,23,456.50``."""
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{fraction}"
