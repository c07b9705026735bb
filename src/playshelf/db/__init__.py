"""Catalog persistence for playshelf.

Module organization:
- connection.py: Connections, the read/write ConnectionPool
- schema/: DDL, versioning and migrations
- types.py: Record dataclasses and enums
- queries/: CRUD operations (callers own transactions)
- views/: Read-side listings (query engine, folders)
"""

from .connection import (
    ConnectionPool,
    DatabaseLockedError,
    get_connection,
    get_default_db_path,
)
from .schema import SCHEMA_VERSION, initialize_database
from .types import (
    EDITABLE_FIELDS,
    ROOT_FOLDER_NAME,
    HistoryEntry,
    MetadataProvenance,
    PlaylistRecord,
    SubtitleRef,
    ThumbnailKind,
    VideoPage,
    VideoRecord,
    WriteTarget,
)

__all__ = [
    "EDITABLE_FIELDS",
    "ROOT_FOLDER_NAME",
    "SCHEMA_VERSION",
    "ConnectionPool",
    "DatabaseLockedError",
    "HistoryEntry",
    "MetadataProvenance",
    "PlaylistRecord",
    "SubtitleRef",
    "ThumbnailKind",
    "VideoPage",
    "VideoRecord",
    "WriteTarget",
    "get_connection",
    "get_default_db_path",
    "initialize_database",
]
