"""Folder view query functions."""

import sqlite3

from .helpers import _folder_scope_clause


def get_folder_thumbnails(
    conn: sqlite3.Connection,
    *,
    parent: str | None = None,
    hide_hidden: bool = False,
) -> list[tuple[str, str | None]]:
    """Return (folder_path, thumbnail) for every video under parent.

    Rows follow the default listing order (newest first, then id) so the
    first thumbnail seen for a folder is the one shown on the default page.

    Args:
        conn: Database connection.
        parent: Restrict to descendants of this folder; None for all.
        hide_hidden: Exclude videos with a dot-prefixed path segment.

    Returns:
        List of (folder_path, thumbnail or None) tuples.
    """
    conditions: list[str] = []
    params: list[str | int] = []

    if parent:
        clause, clause_params = _folder_scope_clause("folder_path", parent)
        conditions.append(clause)
        params.extend(clause_params)
    if hide_hidden:
        conditions.append("is_hidden = 0")

    query = "SELECT folder_path, thumbnail FROM videos"
    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += " ORDER BY created_at DESC, id ASC"

    return [(row[0], row[1]) for row in conn.execute(query, params).fetchall()]
