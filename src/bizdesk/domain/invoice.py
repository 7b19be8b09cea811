"""Invoice validation and creation.

Input is checked against pydantic models before anything reaches the
database; every failure is reported per field. Totals come from
``bizdesk.domain.pricing``.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, TypeVar

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from bizdesk.database.base import Database
from bizdesk.domain.entities import Invoice, InvoiceTotals, Payment, Product
from bizdesk.domain.errors import (
    AuthenticationError,
    FormValidationError,
    NotFoundError,
    invoice_not_found,
    log_failure,
    user_not_authenticated,
)
from bizdesk.domain.pricing import calculate_totals

logger = logging.getLogger(__name__)

__all__ = [
    "InvoiceItemInput",
    "InvoiceInput",
    "InvoiceService",
    "PAYMENT_METHODS",
    "PaymentInput",
    "calculate_totals",
    "validate_invoice",
    "validate_form",
    "validate_payment",
]


class InvoiceItemInput(BaseModel):
    """One line item of an invoice form."""

    product_id: Optional[int] = None
    item_description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., ge=Decimal("0.01"))
    unit_type: Optional[str] = None
    rate: Decimal = Field(..., ge=0)
    tax_percentage: Decimal = Field(default=Decimal(0), ge=0, le=100)

    @field_validator("item_description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Description is required")
        return value.strip()

    @field_validator("tax_percentage", mode="before")
    @classmethod
    def missing_tax_is_zero(cls, value: Any) -> Any:
        return Decimal(0) if value is None or value == "" else value


class InvoiceInput(BaseModel):
    """A complete invoice form."""

    customer_id: int
    invoice_date: date
    due_date: Optional[date] = None
    items: list[InvoiceItemInput] = Field(..., min_length=1)
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None


PAYMENT_METHODS = ("Cash", "UPI", "Card", "Bank Transfer", "Cheque", "Other")


class PaymentInput(BaseModel):
    """A payment recorded by hand against an invoice."""

    invoice_id: int
    payment_date: date
    amount_paid: Decimal = Field(..., gt=0)
    payment_method: str
    notes: Optional[str] = None

    @field_validator("payment_method")
    @classmethod
    def known_method(cls, value: str) -> str:
        for method in PAYMENT_METHODS:
            if method.lower() == value.strip().lower():
                return method
        raise ValueError(f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}")

    @field_validator("notes")
    @classmethod
    def blank_notes_are_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


FormT = TypeVar("FormT", bound=BaseModel)


def validate_form(model: type[FormT], data: FormT | Mapping[str, Any], label: str) -> FormT:
    """Validate ``data`` against a pydantic form model.

    Errors are keyed by dotted field path, or by ``label`` when pydantic
    reports no location.
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as exc:
        field_errors = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or label
            field_errors.setdefault(field, error["msg"])
        raise FormValidationError(field_errors) from exc


def validate_invoice(data: InvoiceInput | Mapping[str, Any]) -> InvoiceInput:
    """Validate raw invoice data.

    Raises:
        FormValidationError: With one message per offending field, keyed by
            its dotted path (e.g. ``items.0.quantity``)
    """
    return validate_form(InvoiceInput, data, "invoice")


def validate_payment(data: PaymentInput | Mapping[str, Any]) -> PaymentInput:
    """Validate a hand-entered payment."""
    return validate_form(PaymentInput, data, "payment")


class RefreshListener(Protocol):
    def schedule_post_invoice_refresh(self) -> None: ...


class InvoiceService:
    """Service for creating and reading invoices."""

    def __init__(
        self,
        db: Database,
        user_id: Optional[str],
        monitor: Optional[RefreshListener] = None,
    ):
        """Initialize invoice service.

        Args:
            db: Database instance
            user_id: Authenticated user, or None when nobody is signed in
            monitor: Inventory monitor told to re-poll after each invoice
        """
        self.db = db
        self.user_id = user_id
        self.monitor = monitor

    def _require_user(self) -> str:
        if not self.user_id:
            raise AuthenticationError(user_not_authenticated())
        return self.user_id

    @staticmethod
    def totals(data: InvoiceInput | Mapping[str, Any]) -> InvoiceTotals:
        """Totals of a validated invoice form."""
        return calculate_totals(validate_invoice(data).items)

    @staticmethod
    def item_from_product(product: Product, quantity: Decimal = Decimal(1)) -> dict[str, Any]:
        """Pre-fill a line item from a product."""
        return {
            "product_id": product.id,
            "item_description": product.name,
            "quantity": quantity,
            "unit_type": product.unit_type,
            "rate": product.default_rate,
            "tax_percentage": product.tax_percentage,
        }

    def create_invoice(self, data: InvoiceInput | Mapping[str, Any]) -> Invoice:
        """Validate and store an invoice with its items and payment.

        Stock is decremented in the same transaction. The inventory monitor,
        when attached, is asked to re-poll afterwards.

        Raises:
            FormValidationError: If the form is invalid (nothing is stored)
            NotFoundError: If the customer or a product does not exist
        """
        invoice = validate_invoice(data)
        user_id = self._require_user()
        with log_failure(logger, "creating invoice"):
            invoice_id = self.db.create_full_invoice(
                user_id,
                customer_id=invoice.customer_id,
                invoice_date=invoice.invoice_date,
                due_date=invoice.due_date,
                notes=invoice.notes,
                terms=invoice.terms_and_conditions,
                items=[item.model_dump() for item in invoice.items],
            )
        logger.info("Created invoice %s for customer %s", invoice_id, invoice.customer_id)

        if self.monitor is not None:
            self.monitor.schedule_post_invoice_refresh()

        stored = self.db.get_invoice(user_id, invoice_id)
        if stored is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return stored

    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID, or None."""
        if not self.user_id:
            return None
        return self.db.get_invoice(self.user_id, invoice_id)

    def list_invoices(self) -> list[Invoice]:
        """List invoices, newest first. Without a user the list is empty."""
        if not self.user_id:
            return []
        with log_failure(logger, "loading invoices"):
            return self.db.list_invoices(self.user_id)

    def list_payments(self, invoice_id: Optional[int] = None) -> list[Payment]:
        """List payments, optionally for one invoice."""
        if not self.user_id:
            return []
        with log_failure(logger, "loading payments"):
            return self.db.list_payments(self.user_id, invoice_id)

    def record_payment(self, data: PaymentInput | Mapping[str, Any]) -> Payment:
        """Record a payment made against an invoice.

        Raises:
            FormValidationError: If the amount, date or method is invalid
            NotFoundError: If the invoice does not exist
        """
        payment = validate_payment(data)
        user_id = self._require_user()
        with log_failure(logger, "recording payment"):
            stored = self.db.add_payment(
                user_id,
                invoice_id=payment.invoice_id,
                amount_paid=payment.amount_paid,
                payment_date=payment.payment_date,
                payment_method=payment.payment_method,
                notes=payment.notes,
            )
        logger.info("Recorded payment of %s on invoice %s", stored.amount_paid, stored.invoice_id)
        return stored

    def amount_paid(self, invoice_id: int) -> Decimal:
        """Sum of every payment recorded against an invoice."""
        return sum((p.amount_paid for p in self.list_payments(invoice_id)), Decimal(0))
