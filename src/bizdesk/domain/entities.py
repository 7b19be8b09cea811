"""Domain model entities for bizdesk.

These are pure data classes representing business concepts, independent of
database schema. Timetables and derived teacher schedules are plain nested
dicts keyed by day name and period label.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from bizdesk.domain.errors import ValidationError


# Sentinel stored in a derived teacher schedule when no class is assigned
FREE = "FREE"

SPLIT = "split"
COMBINED = "combined"
ENTRY_TYPES = (SPLIT, COMBINED)

ATTENDANCE_STATUSES = ("present", "absent", "half-day")


@dataclass(frozen=True)
class Teacher:
    """Teacher domain entity.

    ``schedule`` maps day -> period -> class name (or ``FREE``). It is derived
    from the class timetables and never edited directly.
    """

    id: int
    name: str
    subject: str
    post: str
    contact_number: str
    schedule: dict[str, dict[str, str]] = field(default_factory=dict)
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class AdditionalEntry:
    """Extra teacher in a timetable cell, either a split or a combined period."""

    subject: str
    teacher: str
    type: str = SPLIT
    combined_classes: tuple[str, ...] = ()

    def __post_init__(self):
        if self.type not in ENTRY_TYPES:
            raise ValidationError(f"Unknown entry type '{self.type}' (expected split or combined)")
        classes = tuple(self.combined_classes) if self.type == COMBINED else ()
        object.__setattr__(self, "combined_classes", classes)


@dataclass(frozen=True)
class PeriodEntry:
    """One cell of a class timetable."""

    subject: str = ""
    teacher: str = ""
    time: str = ""
    additional_entries: tuple[AdditionalEntry, ...] = ()


@dataclass(frozen=True)
class ClassSchedule:
    """Class timetable domain entity. This is the authoritative timetable."""

    id: int
    class_name: str
    schedule: dict[str, dict[str, PeriodEntry]] = field(default_factory=dict)


@dataclass(frozen=True)
class SubstitutionRecord:
    """A substitute teacher covering one period for an absent teacher."""

    id: Optional[int]
    date: date
    absent_teacher: str
    period: str
    original_class: str
    original_subject: str
    substitute_teacher: str
    remarks: str = ""


@dataclass(frozen=True)
class SchoolSettings:
    """Per-user period labels and matching time slots."""

    periods: tuple[str, ...]
    time_slots: tuple[str, ...]


@dataclass(frozen=True)
class Staff:
    """Staff member domain entity."""

    id: int
    name: str
    mobile_number: str
    post: str
    workplace: str
    daily_wage: Decimal
    created_at: datetime
    address: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Attendance of one staff member on one day."""

    id: Optional[int]
    staff_id: int
    date: date
    status: str


@dataclass(frozen=True)
class Customer:
    """Invoice customer domain entity."""

    id: int
    name: str
    email: Optional[str]
    contact_number: Optional[str]
    billing_address: Optional[str]
    shipping_address: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Product:
    """Product that can be invoiced and stocked."""

    id: int
    name: str
    unit_type: Optional[str]
    default_rate: Decimal
    tax_percentage: Decimal
    created_at: datetime


@dataclass(frozen=True)
class InventoryItem:
    """Stock level of a single product."""

    id: int
    product: Product
    quantity_on_hand: Optional[Decimal]
    low_stock_threshold: Optional[Decimal]
    last_stocked_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class InvoiceLine:
    """Invoice line item."""

    id: int
    invoice_id: int
    product_id: Optional[int]
    item_description: str
    quantity: Decimal
    unit_type: Optional[str]
    rate: Decimal
    tax_percentage: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity with its line items."""

    id: int
    invoice_number: str
    customer_id: int
    invoice_date: date
    due_date: Optional[date]
    status: str
    subtotal: Decimal
    total_tax_amount: Decimal
    grand_total: Decimal
    notes: Optional[str]
    terms_and_conditions: Optional[str]
    created_at: datetime
    items: tuple[InvoiceLine, ...] = ()


@dataclass(frozen=True)
class Payment:
    """Payment recorded against an invoice."""

    id: int
    invoice_id: int
    amount_paid: Decimal
    payment_date: date
    payment_method: Optional[str]
    notes: Optional[str]


@dataclass(frozen=True)
class InvoiceTotals:
    """Subtotal, tax and grand total of a set of line items."""

    subtotal: Decimal
    tax: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class CompanySettings:
    """Seller details printed at the top of every invoice."""

    company_name: Optional[str] = None
    company_address: Optional[str] = None


@dataclass(frozen=True)
class SalesReport:
    """Invoice totals plus sales per day over a trailing window."""

    total_sales: Decimal
    total_tax: Decimal
    invoice_count: int
    unique_customers: int
    daily_sales: tuple[tuple[date, Decimal], ...] = ()


@dataclass(frozen=True)
class TeacherStats:
    """How much covering one substitute teacher did."""

    teacher: str
    periods: int
    hours: Decimal
    days: int


@dataclass(frozen=True)
class SubstitutionReport:
    """Substitutions in a month or on a day, grouped by date and by substitute."""

    records: tuple[SubstitutionRecord, ...]
    by_date: tuple[tuple[date, tuple[SubstitutionRecord, ...]], ...]
    teacher_stats: tuple[TeacherStats, ...]
