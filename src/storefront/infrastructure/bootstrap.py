"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from storefront.domain.exceptions import StorageError
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.infrastructure.config import Settings, get_settings
from storefront.infrastructure.database.connection_manager import ConnectionManager
from storefront.infrastructure.database.schema import Base
from storefront.infrastructure.persistence.seed import SeedResult, seed
from storefront.infrastructure.persistence.sql_unit_of_work import SqlUnitOfWork

logger = logging.getLogger(__name__)


class Store:
    """A live connection manager plus the unit-of-work factory built on it."""

    def __init__(self, connections: ConnectionManager) -> None:
        self.connections = connections

    def unit_of_work(self) -> UnitOfWork:
        return SqlUnitOfWork(self.connections)

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self.connections.acquire())
        except SQLAlchemyError as exc:
            logger.error(f"Schema creation failed: {exc}", extra={"error_code": StorageError.code})
            raise StorageError("Could not create the schema") from exc

    def load_sample_data(self) -> SeedResult:
        """Upsert the sample accounts and catalog in one transaction."""
        with SqlUnitOfWork(self.connections) as uow:
            result = seed(uow.session)
            uow.commit()
        return result


def connection_manager(settings: Settings | None = None) -> ConnectionManager:
    settings = settings or get_settings()
    return ConnectionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
        max_retries=settings.database_connect_retries,
        backoff_base=settings.database_retry_backoff_ms / 1000,
        reconnect_interval=settings.database_reconnect_interval_seconds,
    )


@contextmanager
def open_store(settings: Settings | None = None) -> Iterator[Store]:
    """Connect (with retries), start self-healing, and release on exit.

    Raises DatabaseConnectionError if the first connection cannot be
    established; callers treat that as fatal.
    """
    connections = connection_manager(settings)
    try:
        connections.test_connection()
        connections.start_reconnect_loop()
        yield Store(connections)
    finally:
        connections.release()
