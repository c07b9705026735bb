"""Unit tests for ConnectionPool."""

import concurrent.futures
import sqlite3
from pathlib import Path

import pytest

from playshelf.db.connection import (
    ConnectionPool,
    DatabaseLockedError,
    check_database_connectivity,
    handle_database_locked,
)


class TestConnectionPool:
    """Tests for ConnectionPool thread-safety and lifecycle."""

    def test_initialize_creates_schema(self, temp_db: Path) -> None:
        """initialize() creates the catalog tables."""
        pool = ConnectionPool(temp_db)
        pool.initialize()

        rows = pool.execute_read(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        )
        tables = {row[0] for row in rows}
        expected = {"videos", "playlists", "playlist_videos", "history", "settings"}
        assert expected <= tables

        pool.close()

    def test_read_connection_is_new_per_call(self, pool: ConnectionPool) -> None:
        """Each read gets its own connection."""
        with pool.read_connection() as first, pool.read_connection() as second:
            assert first is not second

    def test_connections_apply_pragmas(self, pool: ConnectionPool) -> None:
        """Test that standard PRAGMAs are applied to connections."""
        with pool.read_connection() as conn:
            assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
            assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 10000

    def test_transaction_commits_on_success(self, pool: ConnectionPool) -> None:
        """Writes made inside transaction() are visible afterwards."""
        with pool.transaction() as conn:
            conn.execute("INSERT INTO settings (key, value) VALUES ('a', '1')")

        rows = pool.execute_read("SELECT value FROM settings WHERE key = 'a'")
        assert rows[0][0] == "1"

    def test_transaction_rolls_back_on_error(self, pool: ConnectionPool) -> None:
        """An exception inside transaction() discards every write in it."""
        with pytest.raises(RuntimeError):
            with pool.transaction() as conn:
                conn.execute("INSERT INTO settings (key, value) VALUES ('a', '1')")
                raise RuntimeError("boom")

        assert pool.execute_read("SELECT * FROM settings") == []

    def test_close_prevents_new_connections(self, temp_db: Path) -> None:
        """A closed pool refuses reads and writes."""
        pool = ConnectionPool(temp_db)
        pool.initialize()
        pool.close()

        assert pool.is_closed
        with pytest.raises(RuntimeError, match="closed"):
            with pool.read_connection():
                pass
        with pytest.raises(RuntimeError, match="closed"):
            with pool.transaction():
                pass

    def test_close_is_idempotent(self, temp_db: Path) -> None:
        pool = ConnectionPool(temp_db)
        pool.close()
        pool.close()
        assert pool.is_closed

    def test_concurrent_writes_are_serialized(self, pool: ConnectionPool) -> None:
        """Writes from many threads all land, one at a time."""

        def write(i: int) -> None:
            with pool.transaction() as conn:
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?)", (f"k{i}", str(i))
                )

        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(write, range(40)))

        rows = pool.execute_read("SELECT COUNT(*) FROM settings")
        assert rows[0][0] == 40


class TestHandleDatabaseLocked:
    """Tests for the handle_database_locked decorator."""

    def test_converts_locked_error(self) -> None:
        @handle_database_locked
        def locked() -> None:
            raise sqlite3.OperationalError("database is locked")

        with pytest.raises(DatabaseLockedError):
            locked()

    def test_other_operational_errors_propagate(self) -> None:
        @handle_database_locked
        def broken() -> None:
            raise sqlite3.OperationalError("no such table: nope")

        with pytest.raises(sqlite3.OperationalError, match="no such table"):
            broken()


class TestCheckDatabaseConnectivity:
    def test_accessible_database(self, temp_db: Path) -> None:
        assert check_database_connectivity(temp_db) is True

    def test_inaccessible_database(self, temp_dir: Path) -> None:
        """A path whose parent is a file cannot be opened."""
        blocker = temp_dir / "blocker"
        blocker.write_text("x")
        assert check_database_connectivity(blocker / "library.db") is False
