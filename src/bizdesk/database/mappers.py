"""Mapper functions to convert between domain models and SQLAlchemy models.

Rows are default-filled on the way in (a missing schedule becomes ``{}``,
missing text becomes ``""``). Timetable cells are stored as JSON using the
camelCase keys of the shared data format (``additionalEntries``,
``combinedClasses``) and converted to snake_case domain objects here.
"""

from decimal import Decimal
from typing import Any, Optional

from bizdesk.domain import entities as domain
from bizdesk.database.models import (
    Attendance as ORMAttendance,
    ClassSchedule as ORMClassSchedule,
    CompanySettings as ORMCompanySettings,
    Customer as ORMCustomer,
    Inventory as ORMInventory,
    Invoice as ORMInvoice,
    InvoiceItem as ORMInvoiceItem,
    Payment as ORMPayment,
    Product as ORMProduct,
    SchoolSettings as ORMSchoolSettings,
    Staff as ORMStaff,
    SubstitutionRecord as ORMSubstitutionRecord,
    Teacher as ORMTeacher,
)
from bizdesk.domain.substitution_state import DEFAULT_PERIODS, DEFAULT_TIME_SLOTS


def _decimal(value: Any, default: Optional[Decimal] = Decimal(0)) -> Optional[Decimal]:
    if value is None:
        return default
    return value if isinstance(value, Decimal) else Decimal(str(value))


def additional_entry_from_json(data: dict[str, Any]) -> domain.AdditionalEntry:
    """Convert a stored additional-entry dict to a domain AdditionalEntry."""
    entry_type = data.get("type")
    if entry_type not in domain.ENTRY_TYPES:
        entry_type = domain.SPLIT
    return domain.AdditionalEntry(
        subject=data.get("subject") or "",
        teacher=data.get("teacher") or "",
        type=entry_type,
        combined_classes=tuple(data.get("combinedClasses") or ()),
    )


def period_entry_from_json(data: Optional[dict[str, Any]]) -> domain.PeriodEntry:
    """Convert a stored timetable cell to a domain PeriodEntry."""
    data = data or {}
    return domain.PeriodEntry(
        subject=data.get("subject") or "",
        teacher=data.get("teacher") or "",
        time=data.get("time") or "",
        additional_entries=tuple(
            additional_entry_from_json(extra) for extra in data.get("additionalEntries") or ()
        ),
    )


def period_entry_to_json(entry: domain.PeriodEntry) -> dict[str, Any]:
    """Convert a domain PeriodEntry to its stored dict form."""
    data: dict[str, Any] = {
        "subject": entry.subject,
        "teacher": entry.teacher,
        "time": entry.time,
    }
    if entry.additional_entries:
        extras = []
        for extra in entry.additional_entries:
            extra_data: dict[str, Any] = {
                "subject": extra.subject,
                "teacher": extra.teacher,
                "type": extra.type,
            }
            if extra.type == domain.COMBINED:
                extra_data["combinedClasses"] = list(extra.combined_classes)
            extras.append(extra_data)
        data["additionalEntries"] = extras
    return data


def class_timetable_from_json(
    data: Optional[dict[str, Any]],
) -> dict[str, dict[str, domain.PeriodEntry]]:
    """Convert a stored class timetable to day -> period -> PeriodEntry."""
    return {
        day: {period: period_entry_from_json(cell) for period, cell in (periods or {}).items()}
        for day, periods in (data or {}).items()
    }


def class_timetable_to_json(
    schedule: dict[str, dict[str, domain.PeriodEntry]],
) -> dict[str, dict[str, dict[str, Any]]]:
    """Convert a domain class timetable to its stored JSON form."""
    return {
        day: {period: period_entry_to_json(entry) for period, entry in periods.items()}
        for day, periods in schedule.items()
    }


def teacher_to_domain(orm_teacher: ORMTeacher) -> domain.Teacher:
    """Convert SQLAlchemy Teacher model to domain Teacher entity."""
    return domain.Teacher(
        id=orm_teacher.id,
        name=orm_teacher.name,
        subject=orm_teacher.subject or "",
        post=orm_teacher.post or "",
        contact_number=orm_teacher.contact_number or "",
        schedule={day: dict(periods) for day, periods in (orm_teacher.schedule or {}).items()},
        photo_url=orm_teacher.photo_url or None,
    )


def class_schedule_to_domain(orm_class: ORMClassSchedule) -> domain.ClassSchedule:
    """Convert SQLAlchemy ClassSchedule model to domain ClassSchedule entity."""
    return domain.ClassSchedule(
        id=orm_class.id,
        class_name=orm_class.class_name,
        schedule=class_timetable_from_json(orm_class.schedule),
    )


def substitution_to_domain(orm_record: ORMSubstitutionRecord) -> domain.SubstitutionRecord:
    """Convert SQLAlchemy SubstitutionRecord model to domain entity."""
    return domain.SubstitutionRecord(
        id=orm_record.id,
        date=orm_record.date,
        absent_teacher=orm_record.absent_teacher,
        period=orm_record.period,
        original_class=orm_record.original_class or "",
        original_subject=orm_record.original_subject or "",
        substitute_teacher=orm_record.substitute_teacher,
        remarks=orm_record.remarks or "",
    )


def settings_to_domain(orm_settings: Optional[ORMSchoolSettings]) -> domain.SchoolSettings:
    """Convert SQLAlchemy SchoolSettings model (or no row) to domain settings."""
    periods = orm_settings.periods if orm_settings is not None else None
    time_slots = orm_settings.time_slots if orm_settings is not None else None
    return domain.SchoolSettings(
        periods=tuple(periods or DEFAULT_PERIODS),
        time_slots=tuple(time_slots or DEFAULT_TIME_SLOTS),
    )


def staff_to_domain(orm_staff: ORMStaff) -> domain.Staff:
    """Convert SQLAlchemy Staff model to domain Staff entity."""
    return domain.Staff(
        id=orm_staff.id,
        name=orm_staff.name,
        mobile_number=orm_staff.mobile_number,
        post=orm_staff.post,
        workplace=orm_staff.workplace,
        daily_wage=_decimal(orm_staff.daily_wage),
        created_at=orm_staff.created_at,
        address=orm_staff.address or None,
        photo_url=orm_staff.photo_url or None,
    )


def attendance_to_domain(orm_attendance: ORMAttendance) -> domain.AttendanceRecord:
    """Convert SQLAlchemy Attendance model to domain AttendanceRecord."""
    return domain.AttendanceRecord(
        id=orm_attendance.id,
        staff_id=orm_attendance.staff_id,
        date=orm_attendance.date,
        status=orm_attendance.status,
    )


def customer_to_domain(orm_customer: ORMCustomer) -> domain.Customer:
    """Convert SQLAlchemy Customer model to domain Customer entity."""
    return domain.Customer(
        id=orm_customer.id,
        name=orm_customer.name,
        email=orm_customer.email,
        contact_number=orm_customer.contact_number,
        billing_address=orm_customer.billing_address,
        shipping_address=orm_customer.shipping_address,
        created_at=orm_customer.created_at,
    )


def product_to_domain(orm_product: ORMProduct) -> domain.Product:
    """Convert SQLAlchemy Product model to domain Product entity."""
    return domain.Product(
        id=orm_product.id,
        name=orm_product.name,
        unit_type=orm_product.unit_type,
        default_rate=_decimal(orm_product.default_rate),
        tax_percentage=_decimal(orm_product.tax_percentage),
        created_at=orm_product.created_at,
    )


def inventory_to_domain(orm_inventory: ORMInventory) -> domain.InventoryItem:
    """Convert SQLAlchemy Inventory model (with its product) to domain entity."""
    return domain.InventoryItem(
        id=orm_inventory.id,
        product=product_to_domain(orm_inventory.product),
        quantity_on_hand=_decimal(orm_inventory.quantity_on_hand, None),
        low_stock_threshold=_decimal(orm_inventory.low_stock_threshold, None),
        last_stocked_at=orm_inventory.last_stocked_at,
        created_at=orm_inventory.created_at,
    )


def invoice_item_to_domain(orm_item: ORMInvoiceItem) -> domain.InvoiceLine:
    """Convert SQLAlchemy InvoiceItem model to domain InvoiceLine."""
    return domain.InvoiceLine(
        id=orm_item.id,
        invoice_id=orm_item.invoice_id,
        product_id=orm_item.product_id,
        item_description=orm_item.item_description,
        quantity=_decimal(orm_item.quantity),
        unit_type=orm_item.unit_type,
        rate=_decimal(orm_item.rate),
        tax_percentage=_decimal(orm_item.tax_percentage),
        line_total=_decimal(orm_item.line_total),
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model (with items) to domain Invoice."""
    return domain.Invoice(
        id=orm_invoice.id,
        invoice_number=orm_invoice.invoice_number,
        customer_id=orm_invoice.customer_id,
        invoice_date=orm_invoice.invoice_date,
        due_date=orm_invoice.due_date,
        status=orm_invoice.status,
        subtotal=_decimal(orm_invoice.subtotal),
        total_tax_amount=_decimal(orm_invoice.total_tax_amount),
        grand_total=_decimal(orm_invoice.grand_total),
        notes=orm_invoice.notes,
        terms_and_conditions=orm_invoice.terms_and_conditions,
        created_at=orm_invoice.created_at,
        items=tuple(invoice_item_to_domain(item) for item in orm_invoice.items),
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    """Convert SQLAlchemy Payment model to domain Payment."""
    return domain.Payment(
        id=orm_payment.id,
        invoice_id=orm_payment.invoice_id,
        amount_paid=_decimal(orm_payment.amount_paid),
        payment_date=orm_payment.payment_date,
        payment_method=orm_payment.payment_method,
        notes=orm_payment.notes,
    )


def company_settings_to_domain(
    orm_settings: Optional[ORMCompanySettings],
) -> domain.CompanySettings:
    """Convert SQLAlchemy CompanySettings model (or no row) to domain settings."""
    if orm_settings is None:
        return domain.CompanySettings()
    return domain.CompanySettings(
        company_name=orm_settings.company_name or None,
        company_address=orm_settings.company_address or None,
    )
