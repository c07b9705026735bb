"""User-facing catalog mutations.

Every function takes a connection that is already inside a write
transaction (``ConnectionPool.transaction()``), so each call is applied
completely or not at all. Missing records raise VideoNotFoundError or
PlaylistNotFoundError.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass
from pathlib import Path

from playshelf.db import queries
from playshelf.db.types import (
    HistoryEntry,
    PlaylistRecord,
    VideoRecord,
    WriteTarget,
)
from playshelf.errors import PlaylistNotFoundError, VideoNotFoundError
from playshelf.metadata.nfo import SidecarMetadata, find_sidecar, parse_nfo, write_nfo
from playshelf.metadata.reconciler import MetadataEdit, reconcile

logger = logging.getLogger(__name__)

WATCH_LATER_NAME = "Watch Later"

# A saved position this close to the end counts as finished
RESUME_END_MARGIN = 10.0


def require_video(conn: sqlite3.Connection, video_id: str) -> VideoRecord:
    record = queries.get_video_by_id(conn, video_id)
    if record is None:
        raise VideoNotFoundError(video_id)
    return record


def require_playlist(conn: sqlite3.Connection, playlist_id: str) -> PlaylistRecord:
    playlist = queries.get_playlist_by_id(conn, playlist_id)
    if playlist is None:
        raise PlaylistNotFoundError(playlist_id)
    return playlist


# ==========================================================================
# Favorites, views, progress, history
# ==========================================================================


def toggle_favorite(conn: sqlite3.Connection, video_id: str) -> bool:
    """Flip a video's favorite flag and return the new value."""
    value = queries.toggle_favorite_flag(conn, video_id)
    if value is None:
        raise VideoNotFoundError(video_id)
    return value


def set_favorite(conn: sqlite3.Connection, video_id: str, value: bool) -> bool:
    """Set a video's favorite flag explicitly. Safe to retry."""
    if not queries.set_favorite_flag(conn, video_id, value):
        raise VideoNotFoundError(video_id)
    return value


def record_view(conn: sqlite3.Connection, video_id: str) -> int:
    """Count one view and return the new total."""
    views = queries.increment_views(conn, video_id)
    if views is None:
        raise VideoNotFoundError(video_id)
    return views


def set_progress(
    conn: sqlite3.Connection, video_id: str, seconds: float
) -> float | None:
    """Overwrite the saved playback position.

    A position of zero (or less) clears it, marking the video as finished
    or reset. Returns the stored value.
    """
    position = float(seconds) if seconds > 0 else None
    if not queries.set_playback_position(conn, video_id, position):
        raise VideoNotFoundError(video_id)
    return position


def resume_position(record: VideoRecord) -> float | None:
    """Where playback should resume, or None to start from the beginning.

    A saved position within the last ten seconds of a known duration counts
    as finished.
    """
    position = record.playback_position
    if not position or position <= 0:
        return None
    if record.duration and position >= record.duration - RESUME_END_MARGIN:
        return None
    return position


def record_history(conn: sqlite3.Connection, video_id: str) -> HistoryEntry:
    """Mark a video as the most recently watched."""
    require_video(conn, video_id)
    return queries.upsert_history(conn, video_id, queries.utc_now_iso())


# ==========================================================================
# Playlists
# ==========================================================================


def get_or_create_watch_later(conn: sqlite3.Connection) -> PlaylistRecord:
    """Return the Watch Later playlist, creating it on first use.

    If several exist (from older catalogs), the oldest one is used.
    """
    existing = queries.find_playlist_by_name(conn, WATCH_LATER_NAME)
    if existing is not None:
        return existing
    return _insert_playlist(conn, WATCH_LATER_NAME)


def _insert_playlist(conn: sqlite3.Connection, name: str) -> PlaylistRecord:
    playlist_id = f"pl-{uuid.uuid4().hex}"
    playlist = queries.insert_playlist(conn, playlist_id, name, queries.utc_now_iso())
    logger.info("Created playlist %r (%s)", name, playlist_id)
    return playlist


def create_playlist(conn: sqlite3.Connection, name: str) -> PlaylistRecord:
    """Create a playlist.

    Every call creates a new playlist, except for the reserved Watch Later
    name, which always resolves to the single existing one.

    Raises:
        ValueError: If the name is blank.
    """
    name = name.strip()
    if not name:
        raise ValueError("Playlist name must not be empty")
    if name == WATCH_LATER_NAME:
        return get_or_create_watch_later(conn)
    return _insert_playlist(conn, name)


def add_to_playlist(conn: sqlite3.Connection, playlist_id: str, video_id: str) -> bool:
    """Add a video to a playlist. Returns True if it was not already there."""
    require_playlist(conn, playlist_id)
    require_video(conn, video_id)
    return queries.add_playlist_member(
        conn, playlist_id, video_id, queries.utc_now_iso()
    )


def remove_from_playlist(
    conn: sqlite3.Connection, playlist_id: str, video_id: str
) -> bool:
    """Remove a video from a playlist. Returns True if it was a member."""
    require_playlist(conn, playlist_id)
    return queries.remove_playlist_member(conn, playlist_id, video_id)


def toggle_watch_later(conn: sqlite3.Connection, video_id: str) -> bool:
    """Add or remove a video from Watch Later. Returns the new membership."""
    require_video(conn, video_id)
    playlist = get_or_create_watch_later(conn)
    if queries.is_playlist_member(conn, playlist.id, video_id):
        queries.remove_playlist_member(conn, playlist.id, video_id)
        return False
    queries.add_playlist_member(conn, playlist.id, video_id, queries.utc_now_iso())
    return True


# ==========================================================================
# Metadata edits
# ==========================================================================


@dataclass(frozen=True)
class MetadataUpdateResult:
    """Outcome of a user metadata edit."""

    video: VideoRecord
    write_targets: frozenset[WriteTarget]

    @property
    def sidecar_written(self) -> bool:
        return WriteTarget.SIDECAR in self.write_targets


def update_metadata(
    conn: sqlite3.Connection,
    video_id: str,
    edit: MetadataEdit,
    *,
    media_root: Path,
) -> MetadataUpdateResult:
    """Apply a user edit to a video's metadata.

    The edit goes through the reconciler, which decides whether the
    sidecar is ours to rewrite. When it is, the sidecar is written before
    the catalog row, and a failed write aborts the whole call.

    Raises:
        VideoNotFoundError: If the video does not exist.
        SidecarWriteError: If the sidecar must be written and cannot be.
    """
    record = require_video(conn, video_id)
    video_path = media_root.joinpath(*record.relative_path.split("/"))

    sidecar_path = find_sidecar(video_path)
    sidecar = None
    if sidecar_path is not None:
        # An unreadable sidecar still belongs to someone; never overwrite it
        sidecar = parse_nfo(sidecar_path) or SidecarMetadata()

    result = reconcile(record, sidecar, edit)

    if WriteTarget.SIDECAR in result.write_targets:
        target = sidecar_path or video_path.with_suffix(".nfo")
        write_nfo(target, result.record.editable_values())

    queries.update_video(conn, result.record)
    logger.info(
        "Updated metadata for %s: %s -> %s",
        video_id,
        ", ".join(result.changed_fields) or "no changes",
        ", ".join(sorted(t.value for t in result.write_targets)),
    )
    return MetadataUpdateResult(video=result.record, write_targets=result.write_targets)
