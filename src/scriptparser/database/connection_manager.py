"""Pooled SQLite connection management for the script data store.

The pool is process-wide: connections are acquired per operation and
returned immediately afterwards, and ``max_size`` bounds how many
operations touch the database at once.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from scriptparser.config import ScriptParserSettings, get_logger
from scriptparser.exceptions import DatabaseError

logger = get_logger(__name__)


def _is_usable(conn: sqlite3.Connection) -> bool:
    try:
        conn.execute("SELECT 1")
    except sqlite3.Error:
        return False
    return True


class ConnectionPool:
    """Bounded, thread-safe pool of configured SQLite connections.

    Idle connections are handed out most recently used first. A daemon
    thread periodically closes connections that sat idle longer than
    ``max_idle_time``, never dropping below ``min_size``.
    """

    def __init__(
        self,
        settings: ScriptParserSettings,
        db_path: Path | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        max_idle_time: float = 300,
        reap_interval: float = 60,
    ) -> None:
        """Initialize the connection pool.

        Args:
            settings: Configuration settings
            db_path: Database path (defaults to settings.database_path)
            min_size: Connections kept open (defaults to settings)
            max_size: Upper bound on open connections (defaults to settings)
            max_idle_time: Seconds an idle connection may linger before closing
            reap_interval: Seconds between idle-connection sweeps

        Raises:
            DatabaseError: If the initial connections cannot be opened
        """
        self.settings = settings
        self.db_path = Path(db_path or settings.database_path)
        self.min_size = (
            settings.database_pool_min_size if min_size is None else min_size
        )
        self.max_size = (
            settings.database_pool_max_size if max_size is None else max_size
        )
        self.max_idle_time = max_idle_time

        # Stack of (connection, last released at); the end is most recent
        self._idle: list[tuple[sqlite3.Connection, float]] = []
        self._open = 0
        self._in_use = 0
        self._closed = False
        self._available = threading.Condition()

        with self._available:
            for _ in range(self.min_size):
                self._idle.append((self._connect(), time.monotonic()))
                self._open += 1

        self._reap_interval = reap_interval
        self._stop_reaper = threading.Event()
        self._reaper = threading.Thread(
            target=self._reap_loop, name="scriptparser-db-reaper", daemon=True
        )
        self._reaper.start()

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.settings.database_timeout,
                check_same_thread=False,
            )
            conn.execute(f"PRAGMA journal_mode = {self.settings.database_journal_mode}")
            conn.execute(f"PRAGMA synchronous = {self.settings.database_synchronous}")
            # Cascading deletes depend on this being on for every connection
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise DatabaseError(
                message=f"Failed to open database connection: {e}",
                hint="Check database path and permissions",
                details={"db_path": str(self.db_path)},
            ) from e

        conn.row_factory = sqlite3.Row
        return conn

    def _discard(self, conn: sqlite3.Connection) -> None:
        conn.close()
        self._open -= 1

    def acquire(self, timeout: float | None = None) -> sqlite3.Connection:
        """Take a connection, opening one if the pool is below ``max_size``.

        Blocks until a connection is released when the pool is exhausted.

        Args:
            timeout: Seconds to wait (defaults to settings.database_timeout)

        Raises:
            DatabaseError: If the pool is closed or the wait times out
        """
        wait = self.settings.database_timeout if timeout is None else timeout
        deadline = time.monotonic() + wait

        with self._available:
            while True:
                if self._closed:
                    raise DatabaseError(
                        message="Connection pool is closed",
                        hint="The service may be shutting down",
                    )

                while self._idle:
                    conn, _ = self._idle.pop()
                    if _is_usable(conn):
                        self._in_use += 1
                        return conn
                    self._discard(conn)

                if self._open < self.max_size:
                    conn = self._connect()
                    self._open += 1
                    self._in_use += 1
                    return conn

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise DatabaseError(
                        message="Timeout waiting for database connection",
                        hint=f"All {self.max_size} connections are in use",
                        details={"in_use": self._in_use, "open": self._open},
                    )
                self._available.wait(remaining)

    def release(self, conn: sqlite3.Connection) -> None:
        """Return a connection; broken ones and late returns are closed."""
        with self._available:
            self._in_use = max(0, self._in_use - 1)
            if self._closed or not _is_usable(conn):
                self._discard(conn)
            else:
                self._idle.append((conn, time.monotonic()))
            self._available.notify()

    def reap_idle(self) -> int:
        """Close stale or broken idle connections.

        Returns:
            Number of connections closed
        """
        now = time.monotonic()
        closed = 0
        with self._available:
            kept = []
            for conn, released_at in self._idle:
                stale = (
                    now - released_at > self.max_idle_time
                    and self._open > self.min_size
                )
                if stale or not _is_usable(conn):
                    self._discard(conn)
                    closed += 1
                else:
                    kept.append((conn, released_at))
            self._idle = kept

        if closed:
            logger.debug("Closed idle connections", count=closed)
        return closed

    def _reap_loop(self) -> None:
        while not self._stop_reaper.wait(self._reap_interval):
            self.reap_idle()

    def get_stats(self) -> dict[str, Any]:
        """Get pool statistics."""
        with self._available:
            return {
                "total_connections": self._open,
                "active_connections": self._in_use,
                "idle_connections": len(self._idle),
                "min_size": self.min_size,
                "max_size": self.max_size,
                "closed": self._closed,
            }

    def close(self) -> None:
        """Close idle connections and stop the reaper.

        Connections still checked out are closed as they are released.
        """
        with self._available:
            if self._closed:
                return
            self._closed = True
            for conn, _ in self._idle:
                self._discard(conn)
            self._idle.clear()
            self._available.notify_all()

        self._stop_reaper.set()
        self._reaper.join(timeout=0.5)
        logger.info("Connection pool closed")


class DatabaseConnectionManager:
    """Connection manager exposing transactional and read-only contexts."""

    def __init__(
        self,
        settings: ScriptParserSettings,
        db_path: Path | None = None,
    ) -> None:
        self.settings = settings
        self.db_path = Path(db_path or settings.database_path)
        self._pool = ConnectionPool(settings=settings, db_path=self.db_path)

    def get_connection(self, timeout: float | None = None) -> sqlite3.Connection:
        """Get a database connection from the pool."""
        return self._pool.acquire(timeout)

    def release_connection(self, conn: sqlite3.Connection) -> None:
        """Release a connection back to the pool."""
        self._pool.release(conn)

    @contextmanager
    def transaction(
        self, immediate: bool = False
    ) -> Generator[sqlite3.Connection, None, None]:
        """Run a block as one transaction.

        Commits when the block exits normally and rolls back on any error.

        Args:
            immediate: Take the write lock up front (``BEGIN IMMEDIATE``)
        """
        conn = self.get_connection()
        try:
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            self.release_connection(conn)

    @contextmanager
    def readonly(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a connection that refuses writes (``PRAGMA query_only``)."""
        conn = self.get_connection()
        try:
            conn.execute("PRAGMA query_only = ON")
            yield conn
        finally:
            if conn.in_transaction:
                conn.rollback()
            conn.execute("PRAGMA query_only = OFF")
            self.release_connection(conn)

    def get_pool_stats(self) -> dict[str, Any]:
        """Get connection pool statistics."""
        return self._pool.get_stats()

    def close(self) -> None:
        """Close the connection manager and all idle connections."""
        self._pool.close()

    def __enter__(self) -> DatabaseConnectionManager:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
