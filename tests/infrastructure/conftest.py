"""Fixtures backed by a throwaway SQLite database file."""

import pytest

from storefront.infrastructure.bootstrap import Store
from storefront.infrastructure.config import get_settings
from storefront.infrastructure.database.connection_manager import ConnectionManager


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'storefront.db'}"


@pytest.fixture
def connections(database_url):
    manager = ConnectionManager(database_url, reconnect_interval=0.05)
    manager.test_connection()
    yield manager
    manager.release()


@pytest.fixture
def store(connections):
    store = Store(connections)
    store.create_schema()
    return store


@pytest.fixture
def seeded(store):
    return store.load_sample_data()


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
