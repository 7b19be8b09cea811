"""SQLAlchemy models for bizdesk database.

Every table carries a ``user_id`` column; rows belong to the user that
created them and all queries filter on it.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Teacher(Base):
    """Teacher model. ``schedule`` holds the derived weekly schedule as JSON."""

    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    subject = Column(String, nullable=False, default="")
    post = Column(String, nullable=False, default="")
    contact_number = Column(String, nullable=False, default="")
    schedule = Column(JSON, nullable=True)
    photo_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class ClassSchedule(Base):
    """Class timetable model. ``schedule`` maps day -> period -> cell JSON."""

    __tablename__ = "class_schedules"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    class_name = Column(String, nullable=False)
    schedule = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class SubstitutionRecord(Base):
    """Substitution record model."""

    __tablename__ = "substitution_records"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    absent_teacher = Column(String, nullable=False)
    period = Column(String, nullable=False)
    original_class = Column(String, nullable=True)
    original_subject = Column(String, nullable=True)
    substitute_teacher = Column(String, nullable=False)
    remarks = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class SchoolSettings(Base):
    """Per-user school settings model."""

    __tablename__ = "school_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, unique=True)
    periods = Column(JSON, nullable=True)
    time_slots = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=_now, nullable=False)


class Staff(Base):
    """Staff member model."""

    __tablename__ = "staff"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    mobile_number = Column(String, nullable=False)
    address = Column(String, nullable=True)
    post = Column(String, nullable=False)
    workplace = Column(String, nullable=False)
    daily_wage = Column(Numeric(10, 2), nullable=False)
    photo_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    attendance = relationship("Attendance", back_populates="staff", cascade="all, delete-orphan")


class Attendance(Base):
    """Daily attendance model, one row per staff member and date."""

    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("staff_id", "date", name="uq_attendance_staff_date"),)

    # Relationships
    staff = relationship("Staff", back_populates="attendance")


class Customer(Base):
    """Invoice customer model."""

    __tablename__ = "ig_customers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    contact_number = Column(String, nullable=True)
    billing_address = Column(String, nullable=True)
    shipping_address = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    invoices = relationship("Invoice", back_populates="customer")


class Product(Base):
    """Product model."""

    __tablename__ = "ig_products"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    unit_type = Column(String, nullable=True)
    default_rate = Column(Numeric(12, 2), nullable=True)
    tax_percentage = Column(Numeric(5, 2), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    inventory = relationship(
        "Inventory", back_populates="product", uselist=False, cascade="all, delete-orphan"
    )


class Inventory(Base):
    """Stock level model, at most one row per product."""

    __tablename__ = "ig_inventory"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("ig_products.id"), nullable=False, unique=True)
    quantity_on_hand = Column(Numeric(12, 2), nullable=True)
    low_stock_threshold = Column(Numeric(12, 2), nullable=True)
    last_stocked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    product = relationship("Product", back_populates="inventory")


class Invoice(Base):
    """Invoice model."""

    __tablename__ = "ig_invoices"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    invoice_number = Column(String, nullable=False)
    customer_id = Column(Integer, ForeignKey("ig_customers.id"), nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="paid")
    subtotal = Column(Numeric(14, 2), nullable=False)
    total_tax_amount = Column(Numeric(14, 2), nullable=False)
    grand_total = Column(Numeric(14, 2), nullable=False)
    notes = Column(String, nullable=True)
    terms_and_conditions = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "invoice_number", name="uq_user_invoice_number"),)

    # Relationships
    customer = relationship("Customer", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )
    payments = relationship("Payment", back_populates="invoice", cascade="all, delete-orphan")


class InvoiceItem(Base):
    """Invoice line item model."""

    __tablename__ = "ig_invoice_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    invoice_id = Column(Integer, ForeignKey("ig_invoices.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("ig_products.id"), nullable=True)
    item_description = Column(String, nullable=False)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit_type = Column(String, nullable=True)
    rate = Column(Numeric(12, 2), nullable=False)
    tax_percentage = Column(Numeric(5, 2), nullable=True)
    line_total = Column(Numeric(14, 2), nullable=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="items")


class Payment(Base):
    """Payment model."""

    __tablename__ = "ig_payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    invoice_id = Column(Integer, ForeignKey("ig_invoices.id"), nullable=False)
    amount_paid = Column(Numeric(14, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")



class CompanySettings(Base):
    """Per-user company details shown on invoices."""

    __tablename__ = "ig_user_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, unique=True)
    company_name = Column(String, nullable=True)
    company_address = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
