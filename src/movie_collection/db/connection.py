"""Database connection management for the movie collection."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from pathlib import Path
from typing import ParamSpec, TypeVar

from movie_collection.exceptions import DatabaseLockedError, StorageError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def ensure_db_directory(db_path: Path) -> None:
    """Ensure the database directory exists, creating it if necessary."""
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA foreign_keys = ON")
    # WAL lets the enrichment readers run while a write transaction is open
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.execute("PRAGMA busy_timeout = 10000")
    conn.execute("PRAGMA temp_store = MEMORY")
    conn.row_factory = sqlite3.Row


def handle_storage_errors(func: Callable[P, T]) -> Callable[P, T]:
    """Decorator converting sqlite3 errors into StorageError.

    Lock contention becomes DatabaseLockedError; every other sqlite3.Error
    becomes a plain StorageError. The original exception is chained.
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except sqlite3.OperationalError as e:
            if "locked" in str(e).casefold():
                raise DatabaseLockedError(
                    "Database is locked. Another process may be using it."
                ) from e
            raise StorageError(str(e)) from e
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    return wrapper


class ConnectionPool:
    """Thread-safe connection pool for the catalog, queue and job broker.

    Uses separate connection strategies for reads and writes to maximize
    concurrency with SQLite WAL mode:

    - Read operations: Create a new connection per operation (no locking),
      allowing the concurrent episode lookups of a queue listing.
    - Write operations: Use a shared connection with locking so only one
      transaction runs at a time.
    """

    def __init__(self, db_path: Path, timeout: float = 30.0) -> None:
        """Initialize the connection pool.

        Args:
            db_path: Path to SQLite database file.
            timeout: Connection timeout in seconds.
        """
        self.db_path = db_path
        self.timeout = timeout
        self._write_conn: sqlite3.Connection | None = None
        self._write_lock = threading.RLock()
        self._closed = False
        self._closed_lock = threading.Lock()

    def _create_connection(self) -> sqlite3.Connection:
        ensure_db_directory(self.db_path)
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.timeout,
            check_same_thread=False,
            isolation_level=None,
        )
        _apply_pragmas(conn)
        return conn

    def _check_open(self) -> None:
        with self._closed_lock:
            if self._closed:
                raise RuntimeError("Connection pool is closed")

    def _get_or_create_write_connection(self) -> sqlite3.Connection:
        """Get the shared write connection, creating if needed.

        Must be called with _write_lock held.
        """
        self._check_open()
        if self._write_conn is None:
            self._write_conn = self._create_connection()
        return self._write_conn

    def initialize(self) -> None:
        """Create the schema on the write connection if it does not exist."""
        from movie_collection.db.schema import initialize_database

        with self._write_lock:
            initialize_database(self._get_or_create_write_connection())

    @contextmanager
    def read_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a read-only connection (new connection per call).

        Yields:
            A fresh SQLite connection for reading.

        Raises:
            RuntimeError: If the pool has been closed.
        """
        self._check_open()
        conn = self._create_connection()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self, timeout: float | None = None) -> Iterator[sqlite3.Connection]:
        """Context manager for atomic database transactions.

        Commits on success, rolls back on exception. Uses BEGIN IMMEDIATE so
        the write lock is taken up front. Transactions opened on the same
        thread while one is already running join the outer transaction.

        Example:
            with pool.transaction() as conn:
                conn.execute("UPDATE movie_queue SET idx = idx + ? ...", (...))
                conn.execute("INSERT INTO movie_queue ...", (...))

        Yields:
            The database connection for direct query execution.
        """
        effective_timeout = timeout if timeout is not None else self.timeout
        start_time = time.monotonic()

        with self._write_lock:
            conn = self._get_or_create_write_connection()
            if conn.in_transaction:
                yield conn
                return

            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                # Some sqlite errors already rolled the transaction back
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            finally:
                elapsed = time.monotonic() - start_time
                if elapsed > effective_timeout * 0.8:
                    logger.warning(
                        "Slow transaction: %.2fs (threshold: %.1fs)",
                        elapsed,
                        effective_timeout,
                    )

    def close(self) -> None:
        """Close the connection pool.

        After closing, the pool cannot be reused.
        """
        with self._write_lock:
            if self._write_conn is not None:
                try:
                    self._write_conn.close()
                finally:
                    self._write_conn = None
            with self._closed_lock:
                self._closed = True

    @property
    def is_closed(self) -> bool:
        """Check if the pool has been closed."""
        with self._closed_lock:
            return self._closed

    def __enter__(self) -> ConnectionPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
