"""Persisted settings operations.

Values are stored JSON encoded so booleans and numbers round-trip.
"""

import json
import logging
import sqlite3
from typing import Any

logger = logging.getLogger(__name__)


def get_all_settings(conn: sqlite3.Connection) -> dict[str, Any]:
    """Return every stored setting, decoded."""
    result: dict[str, Any] = {}
    for key, raw in conn.execute("SELECT key, value FROM settings").fetchall():
        try:
            result[key] = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring undecodable value for setting %r", key)
    return result


def get_setting(conn: sqlite3.Connection, key: str, default: Any = None) -> Any:
    """Return one decoded setting, or default when absent or undecodable."""
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    if row is None:
        return default
    try:
        return json.loads(row[0])
    except json.JSONDecodeError:
        logger.warning("Ignoring undecodable value for setting %r", key)
        return default


def upsert_settings(conn: sqlite3.Connection, values: dict[str, Any]) -> None:
    """Insert or replace settings.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    conn.executemany(
        """
        INSERT INTO settings (key, value) VALUES (?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """,
        [(key, json.dumps(value)) for key, value in values.items()],
    )
