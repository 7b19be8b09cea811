"""Customer and product domain services."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from bizdesk.database.base import Database
from bizdesk.domain.entities import Customer, Product
from bizdesk.domain.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    customer_not_found,
    duplicate_name,
    log_failure,
    product_not_found,
    user_not_authenticated,
)

logger = logging.getLogger(__name__)


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise AuthenticationError(user_not_authenticated())
    return user_id


def _require_name(name: str, label: str) -> str:
    if not name or not name.strip():
        raise ValidationError(f"{label} cannot be empty")
    return name.strip()


class CustomerService:
    """Service for managing invoice customers."""

    def __init__(self, db: Database, user_id: Optional[str]):
        self.db = db
        self.user_id = user_id

    def list_customers(self) -> list[Customer]:
        """List customers. Without a user the list is empty."""
        if not self.user_id:
            return []
        with log_failure(logger, "loading customers"):
            return self.db.list_customers(self.user_id)

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID, or None."""
        if not self.user_id:
            return None
        return self.db.get_customer(self.user_id, customer_id)

    def create_customer(
        self,
        name: str,
        email: Optional[str] = None,
        contact_number: Optional[str] = None,
        billing_address: Optional[str] = None,
        shipping_address: Optional[str] = None,
    ) -> Customer:
        """Create a customer.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a customer with that name exists
        """
        name = _require_name(name, "Customer name")
        user_id = _require_user(self.user_id)
        for existing in self.db.list_customers(user_id):
            if existing.name == name:
                raise ConflictError(duplicate_name("Customer", name))
        with log_failure(logger, "creating customer"):
            return self.db.create_customer(
                user_id,
                name=name,
                email=email or None,
                contact_number=contact_number or None,
                billing_address=billing_address or None,
                shipping_address=shipping_address or None,
            )

    def update_customer(self, customer_id: int, **changes) -> Customer:
        """Change some fields of a customer.

        Args:
            customer_id: Customer ID
            **changes: Customer fields to replace; None values are ignored
        """
        user_id = _require_user(self.user_id)
        customer = self.db.get_customer(user_id, customer_id)
        if customer is None:
            raise NotFoundError(customer_not_found(customer_id))
        changes = {key: value for key, value in changes.items() if value is not None}
        if "name" in changes:
            changes["name"] = _require_name(changes["name"], "Customer name")
        with log_failure(logger, "updating customer"):
            return self.db.update_customer(user_id, replace(customer, **changes))

    def delete_customer(self, customer_id: int) -> None:
        """Delete a customer."""
        user_id = _require_user(self.user_id)
        with log_failure(logger, "deleting customer"):
            self.db.delete_customer(user_id, customer_id)


class ProductService:
    """Service for managing products."""

    def __init__(self, db: Database, user_id: Optional[str]):
        self.db = db
        self.user_id = user_id

    @staticmethod
    def _validate_numbers(default_rate: Decimal, tax_percentage: Decimal) -> None:
        if default_rate < 0:
            raise ValidationError("Default rate cannot be negative")
        if not 0 <= tax_percentage <= 100:
            raise ValidationError("Tax percentage must be between 0 and 100")

    def list_products(self) -> list[Product]:
        """List products. Without a user the list is empty."""
        if not self.user_id:
            return []
        with log_failure(logger, "loading products"):
            return self.db.list_products(self.user_id)

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID, or None."""
        if not self.user_id:
            return None
        return self.db.get_product(self.user_id, product_id)

    def create_product(
        self,
        name: str,
        unit_type: Optional[str] = None,
        default_rate: Decimal = Decimal(0),
        tax_percentage: Decimal = Decimal(0),
    ) -> Product:
        """Create a product.

        Raises:
            ValidationError: If the name is blank, the rate negative or the tax
                outside 0-100
            ConflictError: If a product with that name exists
        """
        name = _require_name(name, "Product name")
        self._validate_numbers(default_rate, tax_percentage)
        user_id = _require_user(self.user_id)
        for existing in self.db.list_products(user_id):
            if existing.name == name:
                raise ConflictError(duplicate_name("Product", name))
        with log_failure(logger, "creating product"):
            return self.db.create_product(
                user_id,
                name=name,
                unit_type=unit_type or None,
                default_rate=default_rate,
                tax_percentage=tax_percentage,
            )

    def update_product(self, product_id: int, **changes) -> Product:
        """Change some fields of a product; None values are ignored."""
        user_id = _require_user(self.user_id)
        product = self.db.get_product(user_id, product_id)
        if product is None:
            raise NotFoundError(product_not_found(product_id))
        changes = {key: value for key, value in changes.items() if value is not None}
        if "name" in changes:
            changes["name"] = _require_name(changes["name"], "Product name")
        updated = replace(product, **changes)
        self._validate_numbers(updated.default_rate, updated.tax_percentage)
        with log_failure(logger, "updating product"):
            return self.db.update_product(user_id, updated)

    def delete_product(self, product_id: int) -> None:
        """Delete a product and its inventory row."""
        user_id = _require_user(self.user_id)
        with log_failure(logger, "deleting product"):
            self.db.delete_product(user_id, product_id)
