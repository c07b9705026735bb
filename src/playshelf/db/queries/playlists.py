"""Playlist CRUD operations.

All write functions leave transaction management to the caller.
"""

import sqlite3

from playshelf.db.types import PlaylistRecord


def insert_playlist(
    conn: sqlite3.Connection, playlist_id: str, name: str, created_at: str
) -> PlaylistRecord:
    """Insert a new, empty playlist.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    conn.execute(
        "INSERT INTO playlists (id, name, created_at) VALUES (?, ?, ?)",
        (playlist_id, name, created_at),
    )
    return PlaylistRecord(id=playlist_id, name=name, created_at=created_at)


def _member_ids(conn: sqlite3.Connection, playlist_id: str) -> list[str]:
    cursor = conn.execute(
        """
        SELECT video_id FROM playlist_videos
        WHERE playlist_id = ?
        ORDER BY added_at ASC, rowid ASC
        """,
        (playlist_id,),
    )
    return [row[0] for row in cursor.fetchall()]


def get_playlist_by_id(
    conn: sqlite3.Connection, playlist_id: str
) -> PlaylistRecord | None:
    """Get a playlist with its member ids (in insertion order).

    Args:
        conn: Database connection.
        playlist_id: ID of the playlist.

    Returns:
        PlaylistRecord if found, None otherwise.
    """
    row = conn.execute(
        "SELECT id, name, created_at FROM playlists WHERE id = ?", (playlist_id,)
    ).fetchone()
    if row is None:
        return None
    return PlaylistRecord(
        id=row["id"],
        name=row["name"],
        created_at=row["created_at"],
        video_ids=_member_ids(conn, row["id"]),
    )


def find_playlist_by_name(
    conn: sqlite3.Connection, name: str
) -> PlaylistRecord | None:
    """Return the oldest playlist with exactly this name, if any."""
    row = conn.execute(
        """
        SELECT id FROM playlists WHERE name = ?
        ORDER BY created_at ASC, rowid ASC LIMIT 1
        """,
        (name,),
    ).fetchone()
    return get_playlist_by_id(conn, row[0]) if row else None


def list_playlists(conn: sqlite3.Connection) -> list[PlaylistRecord]:
    """List all playlists, newest first, each with its member ids."""
    cursor = conn.execute(
        "SELECT id, name, created_at FROM playlists "
        "ORDER BY created_at DESC, rowid DESC"
    )
    return [
        PlaylistRecord(
            id=row["id"],
            name=row["name"],
            created_at=row["created_at"],
            video_ids=_member_ids(conn, row["id"]),
        )
        for row in cursor.fetchall()
    ]


def add_playlist_member(
    conn: sqlite3.Connection, playlist_id: str, video_id: str, added_at: str
) -> bool:
    """Add a video to a playlist.

    Returns:
        True if the video was newly added, False if it was already a member.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        """
        INSERT INTO playlist_videos (playlist_id, video_id, added_at)
        VALUES (?, ?, ?)
        ON CONFLICT(playlist_id, video_id) DO NOTHING
        """,
        (playlist_id, video_id, added_at),
    )
    return cursor.rowcount > 0


def remove_playlist_member(
    conn: sqlite3.Connection, playlist_id: str, video_id: str
) -> bool:
    """Remove a video from a playlist.

    Returns:
        True if the video was removed, False if it was not a member.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        "DELETE FROM playlist_videos WHERE playlist_id = ? AND video_id = ?",
        (playlist_id, video_id),
    )
    return cursor.rowcount > 0


def is_playlist_member(
    conn: sqlite3.Connection, playlist_id: str, video_id: str
) -> bool:
    row = conn.execute(
        "SELECT 1 FROM playlist_videos WHERE playlist_id = ? AND video_id = ?",
        (playlist_id, video_id),
    ).fetchone()
    return row is not None
