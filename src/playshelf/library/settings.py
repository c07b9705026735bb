"""Persisted user settings with typed known keys."""

from __future__ import annotations

import sqlite3
from typing import Any

from playshelf.db import queries
from playshelf.errors import InvalidSettingError

# Known settings and their defaults
DEFAULT_SETTINGS: dict[str, Any] = {
    "hideHiddenFiles": True,
}

_KNOWN_TYPES: dict[str, type] = {
    "hideHiddenFiles": bool,
}

_SCALAR_TYPES = (str, int, float, bool, type(None))


def get_settings(conn: sqlite3.Connection) -> dict[str, Any]:
    """Return all settings, with defaults for known keys never stored."""
    return {**DEFAULT_SETTINGS, **queries.get_all_settings(conn)}


def validate_settings(values: dict[str, Any]) -> dict[str, Any]:
    """Check setting names and value types.

    Raises:
        InvalidSettingError: On an empty key, a known key with the wrong
            type, or a non-scalar value.
    """
    for key, value in values.items():
        if not isinstance(key, str) or not key.strip():
            raise InvalidSettingError("Setting names must be non-empty strings")
        expected = _KNOWN_TYPES.get(key)
        if expected is not None and not isinstance(value, expected):
            raise InvalidSettingError(
                f"Setting {key!r} must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )
        if not isinstance(value, _SCALAR_TYPES):
            raise InvalidSettingError(f"Setting {key!r} must be a scalar value")
    return values


def update_settings(conn: sqlite3.Connection, values: dict[str, Any]) -> dict[str, Any]:
    """Validate and store settings, returning the full resulting set."""
    queries.upsert_settings(conn, validate_settings(values))
    return get_settings(conn)
