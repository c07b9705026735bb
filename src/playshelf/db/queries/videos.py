"""Video CRUD operations.

All write functions leave transaction management to the caller.
"""

import json
import sqlite3

from playshelf.db.types import ThumbnailKind, VideoRecord

from .helpers import _row_to_video_record, _subtitles_to_json

# Columns a scan or metadata edit may rewrite. Counters, favorites and
# playback position are owned by their dedicated mutations.
_DERIVED_COLUMNS = (
    "display_name",
    "duration",
    "thumbnail",
    "thumbnail_kind",
    "subtitles",
    "channel_avatar",
    "title",
    "release_date",
    "tags",
    "description",
    "channel",
    "external_id",
    "metadata_provenance",
    "user_edited_fields",
    "is_hidden",
    "scanned_at",
)


def _derived_values(record: VideoRecord) -> tuple:
    return (
        record.display_name,
        record.duration,
        record.thumbnail,
        record.thumbnail_kind.value if record.thumbnail_kind else None,
        _subtitles_to_json(record.subtitles),
        record.channel_avatar,
        record.title,
        record.release_date,
        record.tags,
        record.description,
        record.channel,
        record.external_id,
        record.metadata_provenance.value,
        json.dumps(record.user_edited_fields),
        1 if record.is_hidden else 0,
        record.scanned_at,
    )


def insert_video(conn: sqlite3.Connection, record: VideoRecord) -> bool:
    """Insert a video record unless one with the same id exists.

    Args:
        conn: Database connection.
        record: Video record to insert.

    Returns:
        True if a row was inserted, False if the id was already catalogued.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    columns = (
        "id",
        "filename",
        "folder_path",
        "relative_path",
        "created_at",
        "views",
        "is_favorite",
        "playback_position",
    ) + _DERIVED_COLUMNS
    placeholders = ", ".join("?" for _ in columns)
    cursor = conn.execute(
        f"""
        INSERT INTO videos ({", ".join(columns)})
        VALUES ({placeholders})
        ON CONFLICT(id) DO NOTHING
        """,
        (
            record.id,
            record.filename,
            record.folder_path,
            record.relative_path,
            record.created_at,
            record.views,
            1 if record.is_favorite else 0,
            record.playback_position,
        )
        + _derived_values(record),
    )
    return cursor.rowcount > 0


def update_video(conn: sqlite3.Connection, record: VideoRecord) -> bool:
    """Rewrite the scan-derived and editable columns of a video.

    Views, favorite flag and playback position are left untouched.

    Args:
        conn: Database connection.
        record: Record holding the new values.

    Returns:
        True if the video was updated, False if not found.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    assignments = ", ".join(f"{column} = ?" for column in _DERIVED_COLUMNS)
    cursor = conn.execute(
        f"UPDATE videos SET {assignments} WHERE id = ?",
        _derived_values(record) + (record.id,),
    )
    return cursor.rowcount > 0


def get_video_by_id(conn: sqlite3.Connection, video_id: str) -> VideoRecord | None:
    """Get a video record by ID.

    Args:
        conn: Database connection.
        video_id: ID of the video.

    Returns:
        VideoRecord if found, None otherwise.
    """
    cursor = conn.execute("SELECT * FROM videos WHERE id = ?", (video_id,))
    row = cursor.fetchone()
    return _row_to_video_record(row) if row else None


def get_videos_by_ids(
    conn: sqlite3.Connection, video_ids: list[str]
) -> dict[str, VideoRecord]:
    """Batch-load video records keyed by id. Missing ids are omitted."""
    if not video_ids:
        return {}
    placeholders = ",".join("?" for _ in video_ids)
    cursor = conn.execute(
        f"SELECT * FROM videos WHERE id IN ({placeholders})", tuple(video_ids)
    )
    return {row["id"]: _row_to_video_record(row) for row in cursor.fetchall()}


def get_catalogued_paths(conn: sqlite3.Connection) -> dict[str, str]:
    """Return a mapping of relative_path -> id for every catalogued video."""
    cursor = conn.execute("SELECT id, relative_path FROM videos")
    return {row["relative_path"]: row["id"] for row in cursor.fetchall()}


def increment_views(conn: sqlite3.Connection, video_id: str) -> int | None:
    """Add one view to a video.

    Returns:
        The new view count, or None if the video does not exist.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        "UPDATE videos SET views = views + 1 WHERE id = ? RETURNING views",
        (video_id,),
    )
    row = cursor.fetchone()
    return row[0] if row else None


def toggle_favorite_flag(conn: sqlite3.Connection, video_id: str) -> bool | None:
    """Flip a video's favorite flag.

    Returns:
        The new flag value, or None if the video does not exist.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        "UPDATE videos SET is_favorite = 1 - is_favorite WHERE id = ? "
        "RETURNING is_favorite",
        (video_id,),
    )
    row = cursor.fetchone()
    return bool(row[0]) if row else None


def set_favorite_flag(conn: sqlite3.Connection, video_id: str, value: bool) -> bool:
    """Set a video's favorite flag. Returns False if the video does not exist.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        "UPDATE videos SET is_favorite = ? WHERE id = ?",
        (1 if value else 0, video_id),
    )
    return cursor.rowcount > 0


def set_playback_position(
    conn: sqlite3.Connection, video_id: str, position: float | None
) -> bool:
    """Overwrite a video's saved playback position (None clears it).

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        "UPDATE videos SET playback_position = ? WHERE id = ?",
        (position, video_id),
    )
    return cursor.rowcount > 0


def set_thumbnail(
    conn: sqlite3.Connection,
    video_id: str,
    thumbnail: str | None,
    kind: ThumbnailKind | None,
) -> bool:
    """Store a video's thumbnail reference and its origin.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    cursor = conn.execute(
        "UPDATE videos SET thumbnail = ?, thumbnail_kind = ? WHERE id = ?",
        (thumbnail, kind.value if kind else None, video_id),
    )
    return cursor.rowcount > 0

