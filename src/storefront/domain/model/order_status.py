"""Order state machine.

Two independent axes:

- Order status.  PENDING is the initial state.  The owning customer may
  move PENDING -> CANCELLED and nothing else.  An administrator may set
  CONFIRMED, SHIPPED, DELIVERED or CANCELLED from any non-terminal state.
  No forward-only ordering among CONFIRMED and SHIPPED is enforced.
- Payment status.  UNPAID -> PAID -> REFUNDED, one step at a time, with
  no linkage to the order status.

Setting the current value again is accepted as a no-op on both axes.
"""

from __future__ import annotations

from enum import Enum

from storefront.domain.exceptions import InvalidStatusTransitionError


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ADMIN_TARGETS = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})

_PAYMENT_TRANSITIONS = {
    PaymentStatus.UNPAID: frozenset({PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidStatusTransitionError(
            f"Unknown order status {value!r} (expected one of {allowed})"
        ) from None


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise InvalidStatusTransitionError(
            f"Unknown payment status {value!r} (expected one of {allowed})"
        ) from None


def can_customer_cancel(current: OrderStatus) -> bool:
    return current is OrderStatus.PENDING


def check_admin_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Validate an administrative status change.

    Returns True if the status actually changes, False for a no-op.
    """
    if target is current:
        return False
    if target not in ADMIN_TARGETS:
        raise InvalidStatusTransitionError(
            f"Cannot set order status to {target.value}"
        )
    if current in TERMINAL_STATUSES:
        raise InvalidStatusTransitionError(
            f"Cannot change order status from {current.value}: "
            f"{current.value} is final"
        )
    return True


def check_payment_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    """Validate a payment status change. Returns False for a no-op."""
    if target is current:
        return False
    if target not in _PAYMENT_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(
            f"Cannot change payment status from {current.value} to {target.value}"
        )
    return True
