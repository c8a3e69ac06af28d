"""Integration tests for the SQL repositories and unit of work.

Runs the real handlers against a SQLite file, including concurrent
callers racing for the same stock.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import OrderItemSpec
from storefront.application.list_orders import ListOrdersHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import (
    DatabaseConnectionError,
    DuplicateOrderNumberError,
    InsufficientStockError,
    OrderNotCancellableError,
    StorageError,
)
from storefront.domain.model.order_status import OrderStatus
from storefront.infrastructure.database.schema import OrderItemRow, OrderRow

SHIRT = "SHIRT-COT-WHT-001"
PANT = "PANT-WOOL-CHAR-001"
SUIT = "SUIT-WOOL-NAVY-001"


def _stock(store, product_id):
    with store.unit_of_work() as uow:
        return uow.products.get_by_id(product_id).stock


def _row_counts(store):
    with store.connections.session() as session:
        orders = session.execute(select(func.count(OrderRow.id))).scalar_one()
        items = session.execute(select(func.count(OrderItemRow.id))).scalar_one()
    return orders, items


def _create(store, seeded, *specs, **kwargs):
    handler = CreateOrderHandler(store.unit_of_work, **kwargs.pop("handler_kwargs", {}))
    return handler.handle(
        seeded.customer_id, seeded.address_id, list(specs), kwargs.pop("payment", "COD"), **kwargs,
    )


class TestSeed:

    def test_is_idempotent(self, store, seeded):
        again = store.load_sample_data()
        assert again == seeded
        with store.unit_of_work() as uow:
            assert len(uow.products.list_all()) == 3


class TestCreateOrder:

    def test_persists_order_items_and_stock(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        pant = seeded.product_ids[PANT]
        dto = _create(
            store, seeded,
            OrderItemSpec(shirt, 2, size="L", color="White"),
            OrderItemSpec(pant, 1),
            notes="Leave with security",
        )

        assert dto.total_amount == "₹5782.00"
        assert _stock(store, shirt) == 48
        assert _stock(store, pant) == 29
        assert _row_counts(store) == (1, 2)

        shown = ShowOrderHandler(store.unit_of_work).handle(dto.id, user_id=seeded.customer_id)
        assert shown.order_number == dto.order_number
        assert shown.subtotal == "₹4900.00"
        assert shown.tax_amount == "₹882.00"
        assert shown.total_amount == "₹5782.00"
        assert shown.notes == "Leave with security"
        assert shown.user.email == "customer@example.com"
        names = {item.product_name for item in shown.items}
        assert names == {
            "Premium Cotton Shirt Fabric - White",
            "Wool Blend Pant Fabric - Charcoal",
        }

    def test_failure_on_a_later_line_rolls_everything_back(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        suit = seeded.product_ids[SUIT]
        with pytest.raises(InsufficientStockError):
            _create(store, seeded, OrderItemSpec(shirt, 5), OrderItemSpec(suit, 8), OrderItemSpec(suit, 8))
        assert _stock(store, shirt) == 50
        assert _stock(store, suit) == 15
        assert _row_counts(store) == (0, 0)

    def test_duplicate_order_number_is_reported(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        fixed = {"order_number_factory": lambda now: "ORD-1718000000000-SAME01"}
        _create(store, seeded, OrderItemSpec(shirt, 1), handler_kwargs=fixed)
        with pytest.raises(DuplicateOrderNumberError):
            _create(store, seeded, OrderItemSpec(shirt, 1), handler_kwargs=fixed)
        assert _stock(store, shirt) == 49
        assert _row_counts(store) == (1, 1)

    def test_idempotency_key_replays(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        first = _create(store, seeded, OrderItemSpec(shirt, 3), idempotency_key="cart-42")
        second = _create(store, seeded, OrderItemSpec(shirt, 3), idempotency_key="cart-42")
        assert second.id == first.id
        assert _stock(store, shirt) == 47


class TestConditionalUpdates:

    def test_decrement_refuses_to_oversell(self, store, seeded):
        suit = seeded.product_ids[SUIT]
        with store.unit_of_work() as uow:
            assert uow.products.decrement_stock(suit, 16) is False
            assert uow.products.decrement_stock(suit, 15) is True
            uow.commit()
        assert _stock(store, suit) == 0

    def test_missing_product(self, store, seeded):
        with store.unit_of_work() as uow:
            assert uow.products.decrement_stock("missing", 1) is False
            assert uow.products.increment_stock("missing", 1) is False

    def test_status_update_checks_expected(self, store, seeded):
        dto = _create(store, seeded, OrderItemSpec(seeded.product_ids[SHIRT], 1))
        with store.unit_of_work() as uow:
            assert uow.orders.update_status(dto.id, OrderStatus.CONFIRMED, expected=OrderStatus.SHIPPED) is False
            assert uow.orders.update_status(dto.id, OrderStatus.CONFIRMED, expected=OrderStatus.PENDING) is True
            uow.commit()
        with store.unit_of_work() as uow:
            assert uow.orders.get_by_id(dto.id).status is OrderStatus.CONFIRMED

    def test_uncommitted_changes_are_discarded(self, store, seeded):
        suit = seeded.product_ids[SUIT]
        with store.unit_of_work() as uow:
            uow.products.decrement_stock(suit, 5)
        assert _stock(store, suit) == 15


class TestCancelAndAdmin:

    def test_cancel_restores_stock(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        dto = _create(store, seeded, OrderItemSpec(shirt, 3))
        CancelOrderHandler(store.unit_of_work).handle(dto.id, seeded.customer_id)
        assert _stock(store, shirt) == 50
        with pytest.raises(OrderNotCancellableError):
            CancelOrderHandler(store.unit_of_work).handle(dto.id, seeded.customer_id)
        assert _stock(store, shirt) == 50

    def test_admin_flow_and_listing(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        a = _create(store, seeded, OrderItemSpec(shirt, 1))
        b = _create(store, seeded, OrderItemSpec(shirt, 1))
        UpdateOrderStatusHandler(store.unit_of_work).handle(a.id, OrderStatus.SHIPPED)

        handler = ListOrdersHandler(store.unit_of_work)
        shipped = handler.handle_admin(status=OrderStatus.SHIPPED)
        assert [o.id for o in shipped.orders] == [a.id]
        mine = handler.handle(seeded.customer_id, limit=1)
        assert mine.total == 2
        assert mine.pages == 2
        assert mine.orders[0].id in {a.id, b.id}

    def test_bulk_customer_lookups(self, store, seeded):
        with store.unit_of_work() as uow:
            addresses = uow.addresses.get_many([seeded.address_id, "missing"])
            users = uow.users.get_summaries({seeded.customer_id, seeded.admin_id})
            assert uow.addresses.get_many([]) == {}
        assert list(addresses) == [seeded.address_id]
        assert addresses[seeded.address_id].user_id == seeded.customer_id
        assert set(users) == {seeded.customer_id, seeded.admin_id}


class TestConcurrency:

    def test_concurrent_orders_never_oversell(self, store, seeded):
        suit = seeded.product_ids[SUIT]  # 15 in stock

        def place(_):
            try:
                _create(store, seeded, OrderItemSpec(suit, 2))
                return "ok"
            except InsufficientStockError:
                return "short"

        with ThreadPoolExecutor(max_workers=10) as pool:
            results = list(pool.map(place, range(10)))

        assert results.count("ok") == 7
        assert results.count("short") == 3
        assert _stock(store, suit) == 1
        assert _row_counts(store) == (7, 7)

    def test_concurrent_cancels_release_once(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        dto = _create(store, seeded, OrderItemSpec(shirt, 4))
        handler = CancelOrderHandler(store.unit_of_work)

        def cancel(_):
            try:
                handler.handle(dto.id, seeded.customer_id)
                return "ok"
            except OrderNotCancellableError:
                return "refused"

        with ThreadPoolExecutor(max_workers=5) as pool:
            results = list(pool.map(cancel, range(5)))

        assert results.count("ok") == 1
        assert _stock(store, shirt) == 50

    def test_mixed_creates_and_cancels_keep_stock_consistent(self, store, seeded):
        suit = seeded.product_ids[SUIT]  # 15 in stock
        cancellable = [_create(store, seeded, OrderItemSpec(suit, 2)).id for _ in range(3)]
        assert _stock(store, suit) == 9
        cancel_handler = CancelOrderHandler(store.unit_of_work)

        def cancel(order_id):
            try:
                cancel_handler.handle(order_id, seeded.customer_id)
                return "released"
            except OrderNotCancellableError:
                return "refused"

        def place(_):
            try:
                _create(store, seeded, OrderItemSpec(suit, 2))
                return "ok"
            except InsufficientStockError:
                return "short"

        with ThreadPoolExecutor(max_workers=8) as pool:
            cancels = [pool.submit(cancel, order_id) for order_id in cancellable]
            creates = [pool.submit(place, n) for n in range(8)]
            outcomes = [f.result() for f in cancels + creates]

        released = 2 * outcomes.count("released")
        assert outcomes.count("released") == 3
        stock = _stock(store, suit)
        assert 0 <= stock <= 15 + released
        live = ListOrdersHandler(store.unit_of_work).handle_admin(
            status=OrderStatus.PENDING, limit=100,
        )
        assert stock == 15 - 2 * live.total
        assert live.total == outcomes.count("ok")

    def test_order_numbers_are_unique(self, store, seeded):
        shirt = seeded.product_ids[SHIRT]
        with ThreadPoolExecutor(max_workers=8) as pool:
            dtos = list(pool.map(lambda _: _create(store, seeded, OrderItemSpec(shirt, 1)), range(16)))
        assert len({d.order_number for d in dtos}) == 16
        assert _stock(store, shirt) == 34


class TestErrorTranslation:

    def test_connection_errors_flag_the_manager(self, store, seeded):
        with pytest.raises(DatabaseConnectionError):
            with store.unit_of_work():
                raise OperationalError(
                    "SELECT 1", {}, Exception("server closed the connection"),
                    connection_invalidated=True,
                )
        assert not store.connections.is_connected

        # The next unit of work re-establishes the connection.
        assert _stock(store, seeded.product_ids[SUIT]) == 15
        assert store.connections.is_connected

    def test_deadlocks_are_storage_errors(self, store, seeded):
        with pytest.raises(StorageError) as info:
            with store.unit_of_work():
                raise OperationalError("UPDATE products", {}, Exception("deadlock detected"))
        assert info.value.code == "STORAGE_ERROR"
        assert store.connections.is_connected

    def test_interface_errors_flag_the_manager(self, store, seeded):
        with pytest.raises(DatabaseConnectionError):
            with store.unit_of_work():
                raise InterfaceError("SELECT 1", {}, Exception("connection already closed"))
        assert not store.connections.is_connected

    def test_other_errors_become_storage_errors(self, store, seeded):
        with pytest.raises(StorageError) as info:
            with store.unit_of_work():
                raise IntegrityError("INSERT", {}, Exception("CHECK constraint failed"))
        assert info.value.code == "STORAGE_ERROR"
        assert store.connections.is_connected
