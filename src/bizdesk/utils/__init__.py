"""Utility functions for bizdesk."""

from bizdesk.utils.date_parser import parse_date
from bizdesk.utils.amount_parser import parse_amount
from bizdesk.utils.resolvers import resolve_staff, resolve_teacher

__all__ = ["parse_date", "parse_amount", "resolve_staff", "resolve_teacher"]
