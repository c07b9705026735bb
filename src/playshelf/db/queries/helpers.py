"""Shared helper functions for database queries.

This module provides utility functions used across multiple query modules:
- SQL pattern escaping for LIKE queries
- Row mapping functions to convert database rows to typed dataclasses
- UTC timestamp formatting
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone

from playshelf.db.types import (
    EDITABLE_FIELDS,
    MetadataProvenance,
    SubtitleRef,
    ThumbnailKind,
    VideoRecord,
)

logger = logging.getLogger(__name__)


def _escape_like_pattern(value: str) -> str:
    """Escape special characters in SQL LIKE patterns.

    SQLite LIKE patterns treat % and _ as special characters.
    This function escapes them so they match literally.

    Args:
        value: The string to escape for use in a LIKE pattern.

    Returns:
        Escaped string safe for LIKE pattern matching.

    Note:
        Queries using this must include ESCAPE '\\' clause.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _load_json_list(raw: str | None, column: str, video_id: str) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Corrupt %s JSON for video %s, ignoring", column, video_id)
        return []
    return value if isinstance(value, list) else []


def _row_to_video_record(row: sqlite3.Row) -> VideoRecord:
    """Convert a database row to VideoRecord using named columns.

    Args:
        row: sqlite3.Row from a SELECT query on the videos table.

    Returns:
        VideoRecord instance populated from the row.
    """
    video_id = row["id"]
    subtitles = [
        SubtitleRef(
            path=item["path"],
            language=item.get("language", "en"),
            label=item.get("label", "English"),
        )
        for item in _load_json_list(row["subtitles"], "subtitles", video_id)
        if isinstance(item, dict) and "path" in item
    ]
    edited = [
        name
        for name in _load_json_list(
            row["user_edited_fields"], "user_edited_fields", video_id
        )
        if name in EDITABLE_FIELDS
    ]
    kind = row["thumbnail_kind"]
    return VideoRecord(
        id=video_id,
        display_name=row["display_name"],
        filename=row["filename"],
        folder_path=row["folder_path"],
        relative_path=row["relative_path"],
        created_at=row["created_at"],
        scanned_at=row["scanned_at"],
        views=row["views"],
        is_favorite=bool(row["is_favorite"]),
        playback_position=row["playback_position"],
        duration=row["duration"],
        thumbnail=row["thumbnail"],
        thumbnail_kind=ThumbnailKind(kind) if kind else None,
        subtitles=subtitles,
        channel_avatar=row["channel_avatar"],
        title=row["title"],
        release_date=row["release_date"],
        tags=row["tags"],
        description=row["description"],
        channel=row["channel"],
        external_id=row["external_id"],
        metadata_provenance=MetadataProvenance(row["metadata_provenance"]),
        user_edited_fields=edited,
        is_hidden=bool(row["is_hidden"]),
    )


def _subtitles_to_json(subtitles: list[SubtitleRef]) -> str:
    return json.dumps([s.to_dict() for s in subtitles])
