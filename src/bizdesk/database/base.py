"""Abstract database interface.

Every operation takes the ``user_id`` of the authenticated user. Reads only
return that user's rows and writes stamp it on new rows.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from bizdesk.domain.entities import (
    AttendanceRecord,
    ClassSchedule,
    CompanySettings,
    Customer,
    InventoryItem,
    Invoice,
    Payment,
    PeriodEntry,
    Product,
    SchoolSettings,
    Staff,
    SubstitutionRecord,
    Teacher,
)


class Database(ABC):
    """Abstract database interface for bizdesk."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Teacher operations
    @abstractmethod
    def load_teachers(self, user_id: str) -> list[Teacher]:
        """List teachers ordered by name."""
        pass

    @abstractmethod
    def save_teacher(
        self,
        user_id: str,
        name: str,
        subject: str,
        post: str,
        contact_number: str,
        schedule: dict[str, dict[str, str]],
        photo_url: Optional[str] = None,
    ) -> Teacher:
        """Insert a teacher. Returns the stored row."""
        pass

    @abstractmethod
    def update_teacher(self, user_id: str, teacher: Teacher) -> Teacher:
        """Update a teacher in place. Returns the stored row."""
        pass

    @abstractmethod
    def update_teacher_schedules(self, user_id: str, teachers: Sequence[Teacher]) -> None:
        """Store the derived schedules of several teachers in one transaction."""
        pass

    @abstractmethod
    def delete_teacher(self, user_id: str, teacher_id: int) -> None:
        """Delete a teacher by ID."""
        pass

    # Class timetable operations
    @abstractmethod
    def load_classes(self, user_id: str) -> list[ClassSchedule]:
        """List class timetables ordered by class name."""
        pass

    @abstractmethod
    def save_class(
        self, user_id: str, class_name: str, schedule: dict[str, dict[str, PeriodEntry]]
    ) -> ClassSchedule:
        """Insert a class timetable. Returns the stored row."""
        pass

    @abstractmethod
    def update_class(self, user_id: str, class_schedule: ClassSchedule) -> ClassSchedule:
        """Update a class timetable. Returns the stored row."""
        pass

    @abstractmethod
    def delete_class(self, user_id: str, class_id: int) -> None:
        """Delete a class timetable by ID."""
        pass

    # Substitution operations
    @abstractmethod
    def load_substitutions(self, user_id: str) -> list[SubstitutionRecord]:
        """List substitution records, newest date first."""
        pass

    @abstractmethod
    def save_substitutions(
        self, user_id: str, records: Sequence[SubstitutionRecord]
    ) -> list[SubstitutionRecord]:
        """Replace all records for the batch's date in a single transaction.

        Returns the stored records.
        """
        pass

    # Settings operations
    @abstractmethod
    def load_settings(self, user_id: str) -> SchoolSettings:
        """Get school settings, falling back to the defaults."""
        pass

    @abstractmethod
    def save_settings(
        self, user_id: str, periods: Sequence[str], time_slots: Sequence[str]
    ) -> SchoolSettings:
        """Insert or update school settings."""
        pass

    # Staff operations
    @abstractmethod
    def load_staff(self, user_id: str) -> list[Staff]:
        """List staff ordered by creation time."""
        pass

    @abstractmethod
    def add_staff(
        self,
        user_id: str,
        name: str,
        mobile_number: str,
        post: str,
        workplace: str,
        daily_wage: Decimal,
        address: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> Staff:
        """Insert a staff member. Returns the stored row."""
        pass

    @abstractmethod
    def update_staff(self, user_id: str, staff: Staff) -> Staff:
        """Update a staff member. Returns the stored row."""
        pass

    @abstractmethod
    def delete_staff(self, user_id: str, staff_id: int) -> None:
        """Delete a staff member and their attendance."""
        pass

    # Attendance operations
    @abstractmethod
    def load_attendance(self, user_id: str) -> list[AttendanceRecord]:
        """List attendance records, newest date first."""
        pass

    @abstractmethod
    def mark_attendance(
        self, user_id: str, staff_id: int, on_date: date, status: str
    ) -> AttendanceRecord:
        """Insert or update attendance for a staff member on a date."""
        pass

    # Customer operations
    @abstractmethod
    def list_customers(self, user_id: str) -> list[Customer]:
        """List customers ordered by name."""
        pass

    @abstractmethod
    def get_customer(self, user_id: str, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def create_customer(
        self,
        user_id: str,
        name: str,
        email: Optional[str] = None,
        contact_number: Optional[str] = None,
        billing_address: Optional[str] = None,
        shipping_address: Optional[str] = None,
    ) -> Customer:
        """Insert a customer. Returns the stored row."""
        pass

    @abstractmethod
    def update_customer(self, user_id: str, customer: Customer) -> Customer:
        """Update a customer. Returns the stored row."""
        pass

    @abstractmethod
    def delete_customer(self, user_id: str, customer_id: int) -> None:
        """Delete a customer by ID."""
        pass

    # Product operations
    @abstractmethod
    def list_products(self, user_id: str) -> list[Product]:
        """List products ordered by name."""
        pass

    @abstractmethod
    def get_product(self, user_id: str, product_id: int) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    def create_product(
        self,
        user_id: str,
        name: str,
        unit_type: Optional[str] = None,
        default_rate: Optional[Decimal] = None,
        tax_percentage: Optional[Decimal] = None,
    ) -> Product:
        """Insert a product. Returns the stored row."""
        pass

    @abstractmethod
    def update_product(self, user_id: str, product: Product) -> Product:
        """Update a product. Returns the stored row."""
        pass

    @abstractmethod
    def delete_product(self, user_id: str, product_id: int) -> None:
        """Delete a product and its inventory row."""
        pass

    # Inventory operations
    @abstractmethod
    def list_inventory(self, user_id: str) -> list[InventoryItem]:
        """List inventory rows with their product, newest first."""
        pass

    @abstractmethod
    def get_inventory(self, user_id: str, inventory_id: int) -> Optional[InventoryItem]:
        """Get inventory row by ID."""
        pass

    @abstractmethod
    def list_products_without_inventory(self, user_id: str) -> list[Product]:
        """List products that have no inventory row yet."""
        pass

    @abstractmethod
    def create_inventory(
        self,
        user_id: str,
        product_id: int,
        quantity_on_hand: Decimal,
        low_stock_threshold: Decimal,
    ) -> InventoryItem:
        """Insert an inventory row for a product."""
        pass

    @abstractmethod
    def create_inventory_bulk(
        self, user_id: str, entries: Sequence[tuple[int, Decimal, Decimal]]
    ) -> list[InventoryItem]:
        """Insert inventory rows for ``(product_id, quantity, threshold)`` tuples."""
        pass

    @abstractmethod
    def update_inventory(
        self,
        user_id: str,
        inventory_id: int,
        quantity_on_hand: Decimal,
        low_stock_threshold: Decimal,
    ) -> InventoryItem:
        """Update stock levels and stamp ``last_stocked_at``."""
        pass

    @abstractmethod
    def delete_inventory(self, user_id: str, inventory_id: int) -> None:
        """Remove a product from inventory."""
        pass

    # Invoice operations
    @abstractmethod
    def create_full_invoice(
        self,
        user_id: str,
        customer_id: int,
        invoice_date: date,
        due_date: Optional[date],
        notes: Optional[str],
        terms: Optional[str],
        items: Sequence[Mapping[str, Any]],
    ) -> int:
        """Create an invoice with its items, payment and stock decrements.

        Everything happens in one transaction. Returns the invoice ID.
        """
        pass

    @abstractmethod
    def get_invoice(self, user_id: str, invoice_id: int) -> Optional[Invoice]:
        """Get invoice with items by ID."""
        pass

    @abstractmethod
    def list_invoices(self, user_id: str) -> list[Invoice]:
        """List invoices, newest first."""
        pass

    @abstractmethod
    def list_payments(self, user_id: str, invoice_id: Optional[int] = None) -> list[Payment]:
        """List payments, optionally for one invoice."""
        pass

    @abstractmethod
    def add_payment(
        self,
        user_id: str,
        invoice_id: int,
        amount_paid: Decimal,
        payment_date: date,
        payment_method: Optional[str],
        notes: Optional[str],
    ) -> Payment:
        """Record a payment against one of the user's invoices."""
        pass

    # Company settings operations
    @abstractmethod
    def load_company_settings(self, user_id: str) -> CompanySettings:
        """Get company details, empty if none are stored."""
        pass

    @abstractmethod
    def save_company_settings(
        self, user_id: str, company_name: str, company_address: Optional[str]
    ) -> CompanySettings:
        """Insert or update company details."""
        pass
