"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order
from storefront.domain.model.order_status import OrderStatus, PaymentStatus


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order with its items.

        Raises DuplicateOrderNumberError if the order number is taken and
        DuplicateRequestError if the user already has an order with the
        same idempotency key.
        """

    @abstractmethod
    def get_by_id(self, order_id: str, user_id: str | None = None) -> Order | None:
        """Return an order by ID, or None.  With ``user_id``, only if owned."""

    @abstractmethod
    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        """Return the user's order created with ``key``, or None."""

    @abstractmethod
    def list_page(
        self,
        user_id: str | None,
        status: OrderStatus | None,
        offset: int,
        limit: int,
    ) -> list[Order]:
        """Return orders newest first, optionally filtered by owner/status."""

    @abstractmethod
    def count(self, user_id: str | None, status: OrderStatus | None) -> int:
        """Count orders matching the same filters as ``list_page``."""

    @abstractmethod
    def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected: OrderStatus | None = None,
    ) -> bool:
        """Set the order status.

        With ``expected``, only if the stored status still equals it.
        Returns False when no row was updated.
        """

    @abstractmethod
    def update_payment_status(
        self,
        order_id: str,
        status: PaymentStatus,
        expected: PaymentStatus | None = None,
    ) -> bool:
        """Set the payment status, conditionally like ``update_status``."""
