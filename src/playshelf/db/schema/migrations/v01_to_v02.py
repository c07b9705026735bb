"""Database migration from schema version 1 to 2.

- v1→v2: metadata provenance columns on videos and the history seq column
"""

import sqlite3


def migrate_v1_to_v2(conn: sqlite3.Connection) -> None:
    """Migrate database from schema version 1 to version 2.

    Adds new columns:
    - videos.metadata_provenance, videos.user_edited_fields
    - history.seq, backfilled from watched_at order

    Catalogs written by v1 never tracked provenance, so every existing row
    starts as 'none' with no user-edited fields.

    This migration is idempotent - safe to run multiple times.

    Args:
        conn: An open database connection.
    """
    cursor = conn.execute("PRAGMA table_info(videos)")
    video_columns = {row[1] for row in cursor.fetchall()}

    if "metadata_provenance" not in video_columns:
        conn.execute(
            "ALTER TABLE videos ADD COLUMN metadata_provenance "
            "TEXT NOT NULL DEFAULT 'none'"
        )
    if "user_edited_fields" not in video_columns:
        conn.execute(
            "ALTER TABLE videos ADD COLUMN user_edited_fields "
            "TEXT NOT NULL DEFAULT '[]'"
        )

    cursor = conn.execute("PRAGMA table_info(history)")
    history_columns = {row[1] for row in cursor.fetchall()}

    if "seq" not in history_columns:
        conn.execute("ALTER TABLE history ADD COLUMN seq INTEGER NOT NULL DEFAULT 0")
        # Ties on watched_at are broken by video_id so the backfill is total
        conn.execute(
            """
            UPDATE history SET seq = (
                SELECT COUNT(*) FROM history AS h
                WHERE h.watched_at < history.watched_at
                   OR (h.watched_at = history.watched_at
                       AND h.video_id <= history.video_id)
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_history_seq ON history(seq)")

    # Update schema version to 2
    conn.execute(
        "UPDATE _meta SET value = '2' WHERE key = 'schema_version'",
    )
    conn.commit()
