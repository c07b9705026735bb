"""Watch history operations.

All write functions leave transaction management to the caller.
"""

import sqlite3

from playshelf.db.types import HistoryEntry


def upsert_history(
    conn: sqlite3.Connection, video_id: str, watched_at: str
) -> HistoryEntry:
    """Record that a video was watched.

    A video has at most one history row; re-watching moves it to the front
    by assigning the next sequence number.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        """
        INSERT INTO history (video_id, watched_at, seq)
        VALUES (?, ?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM history))
        ON CONFLICT(video_id) DO UPDATE SET
            watched_at = excluded.watched_at,
            seq = excluded.seq
        RETURNING video_id, watched_at, seq
        """,
        (video_id, watched_at),
    )
    row = cursor.fetchone()
    return HistoryEntry(video_id=row[0], watched_at=row[1], seq=row[2])


def list_history(conn: sqlite3.Connection) -> list[HistoryEntry]:
    """List watch history, most recently watched first."""
    cursor = conn.execute(
        "SELECT video_id, watched_at, seq FROM history ORDER BY seq DESC"
    )
    return [
        HistoryEntry(video_id=row[0], watched_at=row[1], seq=row[2])
        for row in cursor.fetchall()
    ]
