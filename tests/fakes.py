"""In-memory fakes for testing.

These implement the same abstract interfaces as the SQL repositories
but keep everything in dicts. No database, no side effects.

A FakeUnitOfWork works on a private copy of the shared FakeStore and
swaps it in on commit, so an exception anywhere inside the ``with``
block leaves the store exactly as it was.
"""

from __future__ import annotations

import copy
import threading
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from decimal import Decimal

from storefront.domain.exceptions import DuplicateOrderNumberError, DuplicateRequestError
from storefront.domain.model.customer import Address, UserSummary
from storefront.domain.model.order import Order
from storefront.domain.model.order_status import OrderStatus, PaymentStatus
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.customer_repository import AddressRepository, UserRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.unit_of_work import UnitOfWork

CUSTOMER_ID = "user-1"
OTHER_CUSTOMER_ID = "user-2"
ADDRESS_ID = "addr-1"


@dataclass
class StoreData:

    products: dict[str, Product] = field(default_factory=dict)
    orders: dict[str, Order] = field(default_factory=dict)
    addresses: dict[str, Address] = field(default_factory=dict)
    users: dict[str, UserSummary] = field(default_factory=dict)


class FakeStore:
    """The shared 'database' behind every FakeUnitOfWork."""

    def __init__(self) -> None:
        self.data = StoreData()
        self.lock = threading.RLock()
        self.commits = 0
        self.fail_next_commit: Exception | None = None
        self.lookups: Counter[str] = Counter()

    def stock(self, product_id: str) -> int:
        return self.data.products[product_id].stock

    def unit_of_work(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)


class FakeProductRepository(ProductRepository):

    def __init__(self, products: dict[str, Product]) -> None:
        self._store = products

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def list_all(self) -> list[Product]:
        return sorted(self._store.values(), key=lambda p: p.name)

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        product = self._store.get(product_id)
        if product is None or not product.can_supply(quantity):
            return False
        self._store[product_id] = replace(product, stock=product.stock - quantity)
        return True

    def increment_stock(self, product_id: str, quantity: int) -> bool:
        product = self._store.get(product_id)
        if product is None:
            return False
        self._store[product_id] = replace(product, stock=product.stock + quantity)
        return True


class FakeOrderRepository(OrderRepository):

    def __init__(self, orders: dict[str, Order]) -> None:
        self._store = orders

    def add(self, order: Order) -> None:
        for existing in self._store.values():
            if existing.order_number == order.order_number:
                raise DuplicateOrderNumberError(order.order_number)
            if (
                order.idempotency_key is not None
                and existing.user_id == order.user_id
                and existing.idempotency_key == order.idempotency_key
            ):
                raise DuplicateRequestError(order.user_id, order.idempotency_key)
        self._store[order.id] = copy.deepcopy(order)

    def get_by_id(self, order_id: str, user_id: str | None = None) -> Order | None:
        order = self._store.get(order_id)
        if order is None or (user_id is not None and order.user_id != user_id):
            return None
        return copy.deepcopy(order)

    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        for order in self._store.values():
            if order.user_id == user_id and order.idempotency_key == key:
                return copy.deepcopy(order)
        return None

    def list_page(
        self,
        user_id: str | None,
        status: OrderStatus | None,
        offset: int,
        limit: int,
    ) -> list[Order]:
        matching = self._matching(user_id, status)
        matching.sort(key=lambda o: (o.created_at, o.order_number), reverse=True)
        return [copy.deepcopy(o) for o in matching[offset:offset + limit]]

    def count(self, user_id: str | None, status: OrderStatus | None) -> int:
        return len(self._matching(user_id, status))

    def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        expected: OrderStatus | None = None,
    ) -> bool:
        order = self._store.get(order_id)
        if order is None or (expected is not None and order.status is not expected):
            return False
        order.status = status
        return True

    def update_payment_status(
        self,
        order_id: str,
        status: PaymentStatus,
        expected: PaymentStatus | None = None,
    ) -> bool:
        order = self._store.get(order_id)
        if order is None or (expected is not None and order.payment_status is not expected):
            return False
        order.payment_status = status
        return True

    def _matching(self, user_id: str | None, status: OrderStatus | None) -> list[Order]:
        return [
            o for o in self._store.values()
            if (user_id is None or o.user_id == user_id)
            and (status is None or o.status is status)
        ]


class FakeAddressRepository(AddressRepository):

    def __init__(self, addresses: dict[str, Address], lookups: Counter[str]) -> None:
        self._store = addresses
        self._lookups = lookups

    def get_for_user(self, address_id: str, user_id: str) -> Address | None:
        self._lookups["addresses"] += 1
        address = self._store.get(address_id)
        if address is None or address.user_id != user_id:
            return None
        return address

    def get_many(self, address_ids: Iterable[str]) -> dict[str, Address]:
        self._lookups["addresses"] += 1
        return {i: self._store[i] for i in address_ids if i in self._store}


class FakeUserRepository(UserRepository):

    def __init__(self, users: dict[str, UserSummary], lookups: Counter[str]) -> None:
        self._store = users
        self._lookups = lookups

    def get_summary(self, user_id: str) -> UserSummary | None:
        self._lookups["users"] += 1
        return self._store.get(user_id)

    def get_summaries(self, user_ids: Iterable[str]) -> dict[str, UserSummary]:
        self._lookups["users"] += 1
        return {i: self._store[i] for i in user_ids if i in self._store}


class FakeUnitOfWork(UnitOfWork):

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self._working: StoreData | None = None

    def __enter__(self) -> FakeUnitOfWork:
        self._store.lock.acquire()
        self._working = copy.deepcopy(self._store.data)
        self.products = FakeProductRepository(self._working.products)
        self.orders = FakeOrderRepository(self._working.orders)
        self.addresses = FakeAddressRepository(self._working.addresses, self._store.lookups)
        self.users = FakeUserRepository(self._working.users, self._store.lookups)
        return super().__enter__()

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._store.lock.release()

    def _commit(self) -> None:
        if self._store.fail_next_commit is not None:
            failure, self._store.fail_next_commit = self._store.fail_next_commit, None
            raise failure
        self._store.data = self._working
        self._store.commits += 1

    def rollback(self) -> None:
        self._working = None


# --- Builders -----------------------------------------------------------------


def make_product(
    product_id: str,
    price: str = "100.00",
    stock: int = 10,
    is_active: bool = True,
    name: str | None = None,
) -> Product:
    return Product(
        id=product_id,
        name=name or product_id.title(),
        price=Money(Decimal(price)),
        stock=stock,
        is_active=is_active,
    )


def seeded_store(*products: Product) -> FakeStore:
    """A store with two customers, one address and the given products."""
    store = FakeStore()
    store.data.users[CUSTOMER_ID] = UserSummary(
        id=CUSTOMER_ID, first_name="John", last_name="Doe", email="customer@example.com",
    )
    store.data.users[OTHER_CUSTOMER_ID] = UserSummary(
        id=OTHER_CUSTOMER_ID, first_name="Jane", last_name="Roe", email="jane@example.com",
    )
    store.data.addresses[ADDRESS_ID] = Address(
        id=ADDRESS_ID,
        user_id=CUSTOMER_ID,
        full_name="John Doe",
        street="221 MG Road",
        city="Bengaluru",
        state="Karnataka",
        postal_code="560001",
        phone="+91 9876543210",
    )
    for product in products:
        store.data.products[product.id] = product
    return store
