"""Unit tests for the InventoryLedger domain service."""

import pytest

from storefront.domain.exceptions import (
    InsufficientStockError,
    ProductInactiveError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.domain.service.inventory_ledger import InventoryLedger
from tests.fakes import FakeProductRepository, make_product


def _ledger(*products):
    store = {p.id: p for p in products}
    return InventoryLedger(FakeProductRepository(store)), store


class TestReserve:

    def test_decrements_each_product(self):
        ledger, store = _ledger(make_product("a", stock=10), make_product("b", stock=5))
        ledger.reserve([("a", 3), ("b", 5)])
        assert store["a"].stock == 7
        assert store["b"].stock == 0

    def test_repeated_product_lines_are_summed(self):
        ledger, store = _ledger(make_product("a", stock=5))
        with pytest.raises(InsufficientStockError) as info:
            ledger.reserve([("a", 3), ("a", 3)])
        assert info.value.requested == 6
        assert info.value.available == 5

    def test_insufficient_stock_names_the_product(self):
        ledger, _ = _ledger(make_product("a", stock=2, name="Linen"))
        with pytest.raises(InsufficientStockError, match="Insufficient stock for Linen"):
            ledger.reserve([("a", 3)])

    def test_inactive_product(self):
        ledger, _ = _ledger(make_product("a", stock=10, is_active=False))
        with pytest.raises(ProductInactiveError):
            ledger.reserve([("a", 1)])

    def test_missing_product(self):
        ledger, _ = _ledger()
        with pytest.raises(ProductNotFoundError):
            ledger.reserve([("ghost", 1)])

    def test_non_positive_quantity(self):
        ledger, store = _ledger(make_product("a", stock=10))
        with pytest.raises(ValidationError):
            ledger.reserve([("a", 0)])
        assert store["a"].stock == 10


class TestRelease:

    def test_returns_stock(self):
        ledger, store = _ledger(make_product("a", stock=7))
        ledger.release([("a", 2), ("a", 1)])
        assert store["a"].stock == 10

    def test_missing_product(self):
        ledger, _ = _ledger()
        with pytest.raises(ProductNotFoundError):
            ledger.release([("ghost", 1)])

    def test_reserve_then_release_restores_stock(self):
        ledger, store = _ledger(make_product("a", stock=10), make_product("b", stock=4))
        items = [("b", 4), ("a", 3)]
        ledger.reserve(items)
        ledger.release(items)
        assert store["a"].stock == 10
        assert store["b"].stock == 4
