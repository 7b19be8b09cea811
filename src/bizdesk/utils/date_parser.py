"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from bizdesk.domain.errors import ValidationError

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", "15/01/2024" (day first)
    - Relative dates: "today", "yesterday", "tomorrow", "next month"
    - Weekdays: "monday" is today or the coming Monday, "last friday" the
      most recent Friday before today

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValidationError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str in WEEKDAYS:
        return today + timedelta(days=(WEEKDAYS.index(date_str) - today.weekday()) % 7)

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)
        elif period in WEEKDAYS:
            days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7
            return today - timedelta(days=days_ago or 7)

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "week":
            return today + timedelta(days=(7 - today.weekday()))
        elif period in WEEKDAYS:
            days_ahead = (WEEKDAYS.index(period) - today.weekday()) % 7
            return today + timedelta(days=days_ahead or 7)

    # ISO dates are unambiguous; everything else is read day first
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass
    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Could not parse date '{date_str}': {e}")
