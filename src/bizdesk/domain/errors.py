"""Shared domain error messages and error types."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class FormValidationError(ValidationError):
    """Validation failure that carries a message per offending field."""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        details = "; ".join(f"{name}: {message}" for name, message in self.field_errors.items())
        super().__init__(f"Invalid input ({details})")


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AuthenticationError(DomainError):
    """Operation requires an authenticated user."""


class BackendError(DomainError):
    """A database round trip failed."""

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message)
        self.original = original


def user_not_authenticated() -> str:
    """Return message for writes attempted without a user."""
    return "User not authenticated"


def teacher_not_found(teacher: int | str) -> str:
    """Return message for missing teacher."""
    if isinstance(teacher, int):
        return f"Teacher {teacher} not found"
    return f"Teacher '{teacher}' not found"


def class_not_found(class_ref: int | str) -> str:
    """Return message for missing class timetable."""
    if isinstance(class_ref, int):
        return f"Class {class_ref} not found"
    return f"Class '{class_ref}' not found"


def staff_not_found(staff: int | str) -> str:
    """Return message for missing staff member."""
    if isinstance(staff, int):
        return f"Staff member {staff} not found"
    return f"Staff member '{staff}' not found"


def customer_not_found(customer: int | str) -> str:
    """Return message for missing customer."""
    if isinstance(customer, int):
        return f"Customer {customer} not found"
    return f"Customer '{customer}' not found"


def product_not_found(product: int | str) -> str:
    """Return message for missing product."""
    if isinstance(product, int):
        return f"Product {product} not found"
    return f"Product '{product}' not found"


def inventory_not_found(inventory_id: int) -> str:
    """Return message for missing inventory row."""
    return f"Inventory item {inventory_id} not found"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def duplicate_name(kind: str, name: str) -> str:
    """Return message for a name that is already taken."""
    return f"{kind} with name '{name}' already exists"


@contextmanager
def log_failure(logger: logging.Logger, what: str) -> Iterator[None]:
    """Log a domain error raised inside the block, then re-raise it."""
    try:
        yield
    except DomainError:
        logger.exception("Error %s", what)
        raise
