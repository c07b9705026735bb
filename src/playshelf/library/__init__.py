"""Library operations on top of the catalog.

Module organization:
- folders.py: Folder hierarchy resolution
- mutations.py: Favorites, views, progress, history, playlists, metadata edits
- thumbnails.py: Custom thumbnail upload and removal
- settings.py: Typed persisted settings
"""

from .folders import (
    FolderEntry,
    child_folders,
    is_under_folder,
    parent_folder,
    resolve_folders,
)
from .mutations import (
    WATCH_LATER_NAME,
    MetadataUpdateResult,
    add_to_playlist,
    create_playlist,
    get_or_create_watch_later,
    record_history,
    record_view,
    remove_from_playlist,
    resume_position,
    set_favorite,
    set_progress,
    toggle_favorite,
    toggle_watch_later,
    update_metadata,
)
from .settings import get_settings, update_settings
from .thumbnails import clear_custom_thumbnail, decode_image_data, set_custom_thumbnail

__all__ = [
    "WATCH_LATER_NAME",
    "FolderEntry",
    "MetadataUpdateResult",
    "add_to_playlist",
    "child_folders",
    "clear_custom_thumbnail",
    "create_playlist",
    "decode_image_data",
    "get_or_create_watch_later",
    "get_settings",
    "is_under_folder",
    "parent_folder",
    "record_history",
    "record_view",
    "remove_from_playlist",
    "resolve_folders",
    "resume_position",
    "set_custom_thumbnail",
    "set_favorite",
    "set_progress",
    "toggle_favorite",
    "toggle_watch_later",
    "update_metadata",
    "update_settings",
]
