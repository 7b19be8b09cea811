"""Inventory domain service and low-stock evaluation."""

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from bizdesk.database.base import Database
from bizdesk.domain.entities import InventoryItem, Product
from bizdesk.domain.errors import (
    AuthenticationError,
    ValidationError,
    log_failure,
    user_not_authenticated,
)

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = Decimal(0)
DEFAULT_THRESHOLD = Decimal(5)


def is_low_stock(item: InventoryItem) -> bool:
    """True when on-hand quantity is at or below the alert threshold.

    Missing values count as 0.
    """
    return (item.quantity_on_hand or Decimal(0)) <= (item.low_stock_threshold or Decimal(0))


def low_stock_items(items: Iterable[InventoryItem]) -> list[InventoryItem]:
    """Filter inventory down to the items that are low on stock."""
    return [item for item in items if is_low_stock(item)]


def _validate_levels(quantity_on_hand: Decimal, low_stock_threshold: Decimal) -> None:
    if quantity_on_hand < 0:
        raise ValidationError("Quantity on hand cannot be negative")
    if low_stock_threshold < 0:
        raise ValidationError("Low stock threshold cannot be negative")


class InventoryService:
    """Service for stock levels of products."""

    def __init__(self, db: Database, user_id: Optional[str]):
        """Initialize inventory service.

        Args:
            db: Database instance
            user_id: Authenticated user, or None when nobody is signed in
        """
        self.db = db
        self.user_id = user_id

    def _require_user(self) -> str:
        if not self.user_id:
            raise AuthenticationError(user_not_authenticated())
        return self.user_id

    def list_inventory(self) -> list[InventoryItem]:
        """List inventory with products, newest first. Without a user the list is empty."""
        if not self.user_id:
            return []
        with log_failure(logger, "loading inventory"):
            return self.db.list_inventory(self.user_id)

    def products_without_inventory(self) -> list[Product]:
        """Products that are not stocked yet."""
        if not self.user_id:
            return []
        with log_failure(logger, "loading products without inventory"):
            return self.db.list_products_without_inventory(self.user_id)

    def add_product_to_inventory(
        self,
        product_id: int,
        quantity_on_hand: Decimal = DEFAULT_QUANTITY,
        low_stock_threshold: Decimal = DEFAULT_THRESHOLD,
    ) -> InventoryItem:
        """Start tracking stock for a product."""
        _validate_levels(quantity_on_hand, low_stock_threshold)
        user_id = self._require_user()
        with log_failure(logger, "adding product to inventory"):
            return self.db.create_inventory(
                user_id, product_id, quantity_on_hand, low_stock_threshold
            )

    def add_all_products(
        self,
        products: Sequence[Product],
        quantities: Optional[Mapping[int, tuple[Decimal, Decimal]]] = None,
    ) -> list[InventoryItem]:
        """Stock several products in one round trip.

        Args:
            products: Products to add
            quantities: Product ID -> ``(quantity, threshold)``. Products with no
                entry get quantity 0 and threshold 5.
        """
        if not products:
            return []
        user_id = self._require_user()
        quantities = quantities or {}
        entries = []
        for product in products:
            quantity, threshold = quantities.get(product.id, (DEFAULT_QUANTITY, DEFAULT_THRESHOLD))
            _validate_levels(quantity, threshold)
            entries.append((product.id, quantity, threshold))
        with log_failure(logger, "adding products to inventory"):
            items = self.db.create_inventory_bulk(user_id, entries)
        logger.info("Added %d products to inventory", len(items))
        return items

    def update_inventory(
        self, inventory_id: int, quantity_on_hand: Decimal, low_stock_threshold: Decimal
    ) -> InventoryItem:
        """Set stock levels; stamps the restock time."""
        _validate_levels(quantity_on_hand, low_stock_threshold)
        user_id = self._require_user()
        with log_failure(logger, "updating inventory"):
            return self.db.update_inventory(
                user_id, inventory_id, quantity_on_hand, low_stock_threshold
            )

    def remove_from_inventory(self, inventory_id: int) -> None:
        """Stop tracking stock for an inventory row."""
        user_id = self._require_user()
        with log_failure(logger, "removing inventory item"):
            self.db.delete_inventory(user_id, inventory_id)

    def low_stock_items(self) -> list[InventoryItem]:
        """Fetch inventory and return the items that are low on stock."""
        return low_stock_items(self.list_inventory())
