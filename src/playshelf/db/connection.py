"""Database connection management for playshelf."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from functools import wraps
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".playshelf" / "library.db"


def get_default_db_path() -> Path:
    """Return the default database path (~/.playshelf/library.db)."""
    return DEFAULT_DB_PATH


def ensure_db_directory(db_path: Path) -> None:
    """Ensure the database directory exists, creating it if necessary."""
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    """Apply the standard PRAGMAs to a new connection."""
    conn.execute("PRAGMA foreign_keys = ON")
    # WAL lets readers proceed while the single writer holds its lock
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.execute("PRAGMA busy_timeout = 10000")
    conn.execute("PRAGMA temp_store = MEMORY")
    conn.row_factory = sqlite3.Row


@contextmanager
def get_connection(
    db_path: Path | None = None, timeout: float = 30.0
) -> Iterator[sqlite3.Connection]:
    """Get a database connection with proper settings.

    Args:
        db_path: Path to the database file. Defaults to ~/.playshelf/library.db.
        timeout: How long to wait for locks (seconds). Default 30s.

    Yields:
        An sqlite3 Connection object.
    """
    if db_path is None:
        db_path = get_default_db_path()

    ensure_db_directory(db_path)

    conn = sqlite3.connect(str(db_path), timeout=timeout)
    _apply_pragmas(conn)

    try:
        yield conn
    finally:
        conn.close()


class DatabaseLockedError(Exception):
    """Raised when the database is locked and cannot be accessed."""


def handle_database_locked(func):
    """Decorator to convert sqlite3.OperationalError to DatabaseLockedError."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except sqlite3.OperationalError as e:
            if "locked" in str(e).casefold():
                raise DatabaseLockedError(
                    "Database is locked. Another process may be using it."
                ) from e
            raise

    return wrapper


def check_database_connectivity(db_path: Path) -> bool:
    """Check if the database is accessible.

    Args:
        db_path: Path to the database file.

    Returns:
        True if the database responds to a trivial query, False otherwise.
    """
    try:
        with get_connection(db_path, timeout=5.0) as conn:
            conn.execute("SELECT 1")
        return True
    except (sqlite3.Error, OSError) as e:
        logger.warning("Database not accessible at %s: %s", db_path, e)
        return False


class ConnectionPool:
    """Thread-safe connection pool for the catalog.

    Uses separate connection strategies for reads and writes to maximize
    concurrency with SQLite WAL mode:

    - Read operations: Create a new connection per operation (no locking),
      allowing queries to run while a scan is writing.
    - Write operations: Use a shared connection with locking so there is
      exactly one writer at a time.
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
        self._write_lock = threading.Lock()
        self._closed = False
        self._closed_lock = threading.Lock()

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new connection with standard PRAGMAs."""
        ensure_db_directory(self.db_path)
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.timeout,
            check_same_thread=False,
            # Transactions are opened explicitly with BEGIN IMMEDIATE
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
        else:
            try:
                self._write_conn.execute("SELECT 1")
            except (sqlite3.ProgrammingError, sqlite3.OperationalError) as e:
                logger.warning("Cached connection is invalid (%s), creating new", e)
                self._write_conn = self._create_connection()

        return self._write_conn

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

    def execute_read(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute a read-only query with its own connection.

        Args:
            query: SQL query to execute.
            params: Query parameters.

        Returns:
            List of result rows.
        """
        with self.read_connection() as conn:
            return conn.execute(query, params).fetchall()

    @contextmanager
    def transaction(self, timeout: float | None = None) -> Iterator[sqlite3.Connection]:
        """Context manager for atomic write transactions.

        Commits on success, rolls back on exception. Uses BEGIN IMMEDIATE so
        the write lock is taken up front rather than on first write.

        Args:
            timeout: Threshold for slow transaction warnings. Defaults to the
                pool's configured timeout.

        Example:
            with pool.transaction() as conn:
                conn.execute("INSERT INTO ...", (...))
                conn.execute("UPDATE ...", (...))

        Yields:
            The database connection for direct query execution.
        """
        effective_timeout = timeout if timeout is not None else self.timeout
        start_time = time.monotonic()

        with self._write_lock:
            conn = self._get_or_create_write_connection()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
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

    def initialize(self) -> None:
        """Create or migrate the schema using the write connection."""
        from playshelf.db.schema import initialize_database

        with self._write_lock:
            conn = self._get_or_create_write_connection()
            initialize_database(conn)

    def close(self) -> None:
        """Close the connection pool.

        After closing, the pool cannot be reused. Any attempt to get a
        connection raises RuntimeError.
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
