"""Abstract repository for the product catalog.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory) live in the
infrastructure layer and the test-suite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically take ``quantity`` units if the product is active and
        has at least that much stock.

        Returns False, changing nothing, when no row qualifies.  The check
        and the decrement must be one statement: a separate read followed
        by a write lets two concurrent callers oversell.
        """

    @abstractmethod
    def increment_stock(self, product_id: str, quantity: int) -> bool:
        """Return ``quantity`` units to stock. False if the product is missing."""
