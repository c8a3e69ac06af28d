"""Unit of Work — one atomic data-store transaction.

Every repository reached through a unit of work shares its transaction.
Leaving the ``with`` block without calling ``commit()`` — including via
an exception or an external abort — rolls everything back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from storefront.domain.repository.customer_repository import (
    AddressRepository,
    UserRepository,
)
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    orders: OrderRepository
    products: ProductRepository
    addresses: AddressRepository
    users: UserRepository

    def __enter__(self) -> UnitOfWork:
        self._committed = False
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._committed:
            self.rollback()

    def commit(self) -> None:
        self._commit()
        self._committed = True

    @abstractmethod
    def _commit(self) -> None:
        """Make every change in this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change in this unit."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
