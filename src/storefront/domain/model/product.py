"""Product as seen by the order core.

The catalog owns the full product record.  The core reads price, stock
and the active flag, and changes stock only through the inventory
ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class Product:

    id: str
    name: str
    price: Money
    stock: int
    is_active: bool = True
    sku: str | None = None

    def can_supply(self, quantity: int) -> bool:
        return self.is_active and self.stock >= quantity
