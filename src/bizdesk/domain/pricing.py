"""Invoice line-item arithmetic."""

from decimal import Decimal
from typing import Any, Iterable

from bizdesk.domain.entities import InvoiceTotals

HUNDRED = Decimal(100)


def _number(item: Any, name: str) -> Decimal:
    """Read a numeric field from a mapping or an object; missing counts as 0."""
    if isinstance(item, dict):
        value = item.get(name)
    else:
        value = getattr(item, name, None)
    if value is None or value == "":
        return Decimal(0)
    return value if isinstance(value, Decimal) else Decimal(str(value))


def line_subtotal(item: Any) -> Decimal:
    """Return rate x quantity for one line."""
    return _number(item, "rate") * _number(item, "quantity")


def line_tax(item: Any) -> Decimal:
    """Return the tax due on one line."""
    return line_subtotal(item) * _number(item, "tax_percentage") / HUNDRED


def line_total(item: Any) -> Decimal:
    """Return subtotal plus tax for one line."""
    return line_subtotal(item) + line_tax(item)


def calculate_totals(items: Iterable[Any]) -> InvoiceTotals:
    """Compute subtotal, tax and grand total over line items.

    Items may be mappings or objects exposing ``quantity``, ``rate`` and
    ``tax_percentage``. No rounding is applied here; two-decimal formatting
    belongs to display code.
    """
    subtotal = Decimal(0)
    tax = Decimal(0)
    for item in items:
        subtotal += line_subtotal(item)
        tax += line_tax(item)
    return InvoiceTotals(subtotal=subtotal, tax=tax, grand_total=subtotal + tax)


def format_money(amount: Decimal) -> str:
    """Format an amount with two decimals for display."""
    return f"{amount:,.2f}"
