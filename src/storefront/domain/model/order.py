"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items.  Line items are
frozen at creation: product, quantity and unit price never change.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from storefront.domain.exceptions import ValidationError
from storefront.domain.model import order_status
from storefront.domain.model.order_status import OrderStatus, PaymentStatus
from storefront.domain.model.pricing import PriceBreakdown, price_lines
from storefront.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class OrderItem:
    """One product line, with the catalog price captured at order time."""

    product_id: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    size: str | None = None
    color: str | None = None
    product_name: str | None = None  # display only, joined on read
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for purchases.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules and prices the cart.  The ``__init__`` is intentionally
    simple so the repository can reconstitute persisted orders without
    re-validating.
    """

    id: str
    order_number: str
    user_id: str
    address_id: str
    items: list[OrderItem]
    pricing: PriceBreakdown
    payment_method: str
    notes: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    idempotency_key: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        user_id: str,
        address_id: str,
        items: list[OrderItem],
        payment_method: str,
        notes: str | None = None,
        idempotency_key: str | None = None,
        created_at: datetime | None = None,
    ) -> Order:
        """Create a new PENDING, UNPAID order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        if not payment_method or not payment_method.strip():
            raise ValidationError("Payment method is required")

        return Order(
            id=str(uuid.uuid4()),
            order_number=order_number,
            user_id=user_id,
            address_id=address_id,
            items=list(items),
            pricing=price_lines((i.unit_price, i.quantity) for i in items),
            payment_method=payment_method.strip(),
            notes=notes.strip() if notes and notes.strip() else None,
            idempotency_key=idempotency_key,
            created_at=created_at or datetime.now(timezone.utc),
        )

    # --- State transitions ----------------------------------------------------

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def can_be_cancelled_by(self, user_id: str) -> bool:
        return self.is_owned_by(user_id) and order_status.can_customer_cancel(self.status)

    def set_status(self, target: OrderStatus) -> bool:
        """Administrative status change. Returns False if nothing changed."""
        changed = order_status.check_admin_transition(self.status, target)
        self.status = target
        return changed

    def set_payment_status(self, target: PaymentStatus) -> bool:
        changed = order_status.check_payment_transition(self.payment_status, target)
        self.payment_status = target
        return changed

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return self.pricing.subtotal

    @property
    def shipping_cost(self) -> Money:
        return self.pricing.shipping_cost

    @property
    def tax_amount(self) -> Money:
        return self.pricing.tax_amount

    @property
    def total_amount(self) -> Money:
        return self.pricing.total_amount

    @property
    def reservation(self) -> list[tuple[str, int]]:
        """``(product_id, quantity)`` pairs held in stock by this order."""
        return [(item.product_id, item.quantity.value) for item in self.items]
