"""SQLAlchemy Unit of Work — one session, one transaction.

Invariants:
    - Every repository in the unit shares one Session, so the order row,
      its items and the stock updates commit or roll back together
    - Leaving the block without commit() rolls back; the session is
      always closed
    - SQLAlchemy exceptions never escape: connection failures become
      DatabaseConnectionError (and flag the manager disconnected) only
      when the connection itself is gone; deadlocks and everything
      else become StorageError
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from storefront.domain.exceptions import DatabaseConnectionError, StorageError
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.infrastructure.database.connection_manager import ConnectionManager
from storefront.infrastructure.persistence.sql_customer_repository import (
    SqlAddressRepository,
    SqlUserRepository,
)
from storefront.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from storefront.infrastructure.persistence.sql_product_repository import SqlProductRepository

logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):

    def __init__(self, connections: ConnectionManager) -> None:
        self._connections = connections
        self._session = None

    def __enter__(self) -> SqlUnitOfWork:
        self._session = self._connections.session()
        self.orders = SqlOrderRepository(self._session)
        self.products = SqlProductRepository(self._session)
        self.addresses = SqlAddressRepository(self._session)
        self.users = SqlUserRepository(self._session)
        return super().__enter__()

    @property
    def session(self) -> Session:
        """The session shared by this unit's repositories; valid inside the block."""
        assert self._session is not None
        return self._session

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        except SQLAlchemyError as rollback_exc:
            logger.warning(f"Rollback failed: {rollback_exc}")
            if exc is None:
                exc = rollback_exc
        finally:
            self._session.close()
            self._session = None

        if isinstance(exc, SQLAlchemyError):
            raise self._translate(exc) from exc

    def _commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    # --- Internal helpers -----------------------------------------------------

    def _translate(self, exc: SQLAlchemyError) -> Exception:
        if isinstance(exc, IntegrityError):
            logger.error(f"DB integrity error: {exc}", extra={"error_code": StorageError.code})
            return StorageError("Integrity constraint violated")
        if isinstance(exc, (InterfaceError, DisconnectionError)) or (
            isinstance(exc, DBAPIError) and exc.connection_invalidated
        ):
            self._connections.mark_disconnected(str(exc))
            logger.error(
                f"DB connection error: {exc}",
                extra={"error_code": DatabaseConnectionError.code},
            )
            return DatabaseConnectionError("Database connection lost")
        if isinstance(exc, OperationalError):
            # Deadlock or lock timeout; the connection is still usable.
            logger.error(f"DB operational error: {exc}", extra={"error_code": StorageError.code})
            return StorageError("Database operation could not complete")
        logger.error(f"SQLAlchemy error: {exc}", extra={"error_code": StorageError.code})
        return StorageError("Database operation failed")
