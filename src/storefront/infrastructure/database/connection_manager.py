"""Connection Resilience Manager — owns the data-store engine and keeps it usable.

Invariants:
    - One manager instance per process, constructed explicitly and passed
      to whatever needs the data store (no module-level singleton)
    - Engine, connected flag and retry counter are mutated only here, under
      ``_lock``; the lock covers one connection attempt at a time and is
      never held across a backoff sleep, so request-time callers wait for
      at most one in-flight attempt
    - ``release()`` leaves the manager as if freshly constructed

Retry policy:
    ``test_connection()`` makes one attempt plus up to ``max_retries``
    retries, sleeping ``backoff_base * n`` seconds before retry ``n``
    (2s, 4s, 6s, 8s, 10s with the defaults).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront.domain.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF_BASE_SECONDS = 2.0
DEFAULT_RECONNECT_INTERVAL_SECONDS = 30.0


@dataclass(frozen=True)
class ConnectionStatus:

    connected: bool
    retries: int
    max_retries: int


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    """Engine keyword arguments appropriate for the database backend."""
    if database_url.startswith("sqlite"):
        return {
            "pool_pre_ping": True,
            "connect_args": {"check_same_thread": False, "timeout": 30},
        }
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


class ConnectionManager:
    """Single shared handle to the data store with retry and self-healing."""

    def __init__(
        self,
        database_url: str,
        *,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE_SECONDS,
        reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL_SECONDS,
        engine_factory: Callable[..., Engine] = create_engine,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self.database_url = database_url
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.reconnect_interval = reconnect_interval
        self._engine_kwargs = engine_options(database_url, pool_size, max_overflow)
        self._engine_kwargs["echo"] = echo
        self._engine_factory = engine_factory

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self._reconnect_thread: threading.Thread | None = None

        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._connected = False
        self._retries = 0

    # --- Public API -------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._connected

    def acquire(self) -> Engine:
        """Return the live engine, establishing it if needed.

        Without an engine this runs the full retry ladder.  With an engine
        already flagged disconnected it makes one attempt, so request-time
        callers fail fast with DB_UNAVAILABLE while the reconnect loop
        keeps trying in the background.
        """
        engine = self._engine
        if engine is not None and self._connected:
            return engine

        if engine is None:
            self.test_connection()
        else:
            with self._lock:
                if not self._connected:
                    try:
                        self._establish()
                    except SQLAlchemyError as exc:
                        self._connected = False
                        logger.error(f"Database reconnect failed: {exc}")
                        raise DatabaseConnectionError(
                            "Database is unavailable"
                        ) from exc
        assert self._engine is not None
        return self._engine

    def session(self) -> Session:
        """Open a new ORM session on the live engine."""
        self.acquire()
        assert self._session_factory is not None
        return self._session_factory()

    def test_connection(self) -> bool:
        """Connect and run ``SELECT 1``, retrying with linear backoff.

        Raises DatabaseConnectionError once retries are exhausted.
        """
        return self._connect_with_retry()

    def health_check(self) -> bool:
        """True only if the data store answers a liveness query."""
        try:
            if not self._connected:
                with self._lock:
                    if not self._connected:
                        self._establish()
            self._ping()
            return True
        except SQLAlchemyError as exc:
            logger.error(f"Database health check failed: {exc}")
            self._connected = False
            return False

    def mark_disconnected(self, reason: str = "") -> None:
        """Flag the connection as lost so the next use re-establishes it."""
        if self._connected:
            logger.warning(f"Database connection lost: {reason}")
        self._connected = False

    def status(self) -> ConnectionStatus:
        return ConnectionStatus(
            connected=self._connected,
            retries=self._retries,
            max_retries=self.max_retries,
        )

    # --- Background reconnection ------------------------------------------------

    def start_reconnect_loop(self) -> None:
        """Start the background self-heal thread (idempotent)."""
        if self._reconnect_thread is not None and self._reconnect_thread.is_alive():
            return
        self._stop_event.clear()
        self._reconnect_thread = threading.Thread(
            target=self._reconnect_loop, name="db-reconnect", daemon=True,
        )
        self._reconnect_thread.start()
        logger.debug(f"Reconnect loop started (interval={self.reconnect_interval}s)")

    def stop_reconnect_loop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        thread = self._reconnect_thread
        if thread is not None:
            thread.join(timeout=timeout)
            self._reconnect_thread = None

    def _reconnect_loop(self) -> None:
        while not self._stop_event.wait(self.reconnect_interval):
            if self._connected:
                continue
            try:
                self.test_connection()
            except DatabaseConnectionError as exc:
                logger.error(f"Auto-reconnect failed: {exc}")

    # --- Shutdown ---------------------------------------------------------------

    def release(self) -> None:
        """Stop the reconnect loop, close every pooled connection, reset state."""
        self.stop_reconnect_loop()
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                logger.info("Database disconnected")
            self._engine = None
            self._session_factory = None
            self._connected = False
            self._retries = 0
        self._stop_event.clear()

    # --- Internal helpers -------------------------------------------------------

    def _connect_with_retry(self) -> bool:
        """Takes ``_lock`` per attempt; sleeps between attempts without it."""
        with self._lock:
            self._retries = 0
        while True:
            with self._lock:
                try:
                    self._establish()
                    logger.info("Database connected")
                    return True
                except SQLAlchemyError as exc:
                    self._connected = False
                    logger.error(f"Database connection failed: {exc}")
                    if self._retries >= self.max_retries or self._stop_event.is_set():
                        raise DatabaseConnectionError(
                            f"Could not connect to the database after {self._retries + 1} attempts"
                        ) from exc
                    self._retries += 1
                    retry = self._retries
            delay = self.backoff_base * retry
            logger.info(
                f"Retrying connection ({retry}/{self.max_retries}) in {delay:.1f}s",
                extra={"attempt": retry},
            )
            self._sleep(delay)

    def _establish(self) -> None:
        if self._engine is None:
            self._engine = self._create_engine()
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        self._ping()
        self._connected = True
        self._retries = 0

    def _create_engine(self) -> Engine:
        engine = self._engine_factory(self.database_url, **self._engine_kwargs)
        if self.database_url.startswith("sqlite"):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    def _ping(self) -> None:
        assert self._engine is not None
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
