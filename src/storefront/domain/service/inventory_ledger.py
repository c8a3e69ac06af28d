"""Domain service: Inventory Ledger.

Keeps product stock consistent with the set of non-cancelled order
lines.  It lives in the domain layer because the non-negative stock rule
is a core business rule, not just orchestration.

The ledger never commits.  It runs inside the caller's unit of work, so
a failure on the third product discards the decrements already applied
to the first two together with the order insert.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from storefront.domain.exceptions import (
    InsufficientStockError,
    ProductInactiveError,
    ProductNotFoundError,
)
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.product_repository import ProductRepository


class InventoryLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def reserve(self, items: Iterable[tuple[str, int]]) -> None:
        """Take stock for every ``(product_id, quantity)`` pair.

        Each product is decremented with a single conditional update, so
        concurrent reservations can never drive stock below zero.  When
        the update matches no row, the product is re-read only to name
        the reason.
        """
        for product_id, quantity in _per_product(items):
            if self._product_repo.decrement_stock(product_id, quantity):
                continue

            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if not product.is_active:
                raise ProductInactiveError(product_id, product.name)
            raise InsufficientStockError(
                product_id, product.name, quantity, product.stock,
            )

    def release(self, items: Iterable[tuple[str, int]]) -> None:
        """Return stock for every ``(product_id, quantity)`` pair."""
        for product_id, quantity in _per_product(items):
            if not self._product_repo.increment_stock(product_id, quantity):
                raise ProductNotFoundError(product_id)


def _per_product(items: Iterable[tuple[str, int]]) -> list[tuple[str, int]]:
    """Sum quantities per product, in product-id order.

    A fixed order keeps row locks acquired in the same sequence by every
    transaction.
    """
    totals: dict[str, int] = defaultdict(int)
    for product_id, quantity in items:
        totals[product_id] += Quantity(quantity).value
    return sorted(totals.items())
