"""Database query operations package.

This package provides CRUD operations for all catalog tables.
Functions are organized by domain but re-exported here for convenience.

Module organization:
- helpers.py: SQL utilities and row mapping functions
- videos.py: Video CRUD and counters
- playlists.py: Playlists and membership
- history.py: Watch history
- settings.py: Persisted settings

Usage:
    from playshelf.db.queries import get_video_by_id, upsert_history
"""

from .helpers import utc_now_iso
from .history import list_history, upsert_history
from .playlists import (
    add_playlist_member,
    find_playlist_by_name,
    get_playlist_by_id,
    insert_playlist,
    is_playlist_member,
    list_playlists,
    remove_playlist_member,
)
from .settings import get_all_settings, get_setting, upsert_settings
from .videos import (
    get_catalogued_paths,
    get_video_by_id,
    get_videos_by_ids,
    increment_views,
    insert_video,
    set_favorite_flag,
    set_playback_position,
    set_thumbnail,
    toggle_favorite_flag,
    update_video,
)

__all__ = [
    "add_playlist_member",
    "find_playlist_by_name",
    "get_all_settings",
    "get_catalogued_paths",
    "get_playlist_by_id",
    "get_setting",
    "get_video_by_id",
    "get_videos_by_ids",
    "increment_views",
    "insert_playlist",
    "insert_video",
    "is_playlist_member",
    "list_history",
    "list_playlists",
    "remove_playlist_member",
    "set_favorite_flag",
    "set_playback_position",
    "set_thumbnail",
    "toggle_favorite_flag",
    "update_video",
    "upsert_history",
    "upsert_settings",
    "utc_now_iso",
]
