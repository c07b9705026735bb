"""Data type definitions for the playshelf catalog.

This module contains all enums and dataclasses for the database layer:
- Catalog records (VideoRecord, PlaylistRecord, HistoryEntry)
- Metadata provenance and write target enums
- View models for typed query results (VideoPage)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

# Editable metadata fields, in the order they are presented to users.
EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "release_date",
    "tags",
    "description",
    "channel",
    "external_id",
)

# Folder name used for files that sit directly under the media root.
ROOT_FOLDER_NAME = "Local Library"


class MetadataProvenance(Enum):
    """Who owns a video's metadata, governing overwrite safety."""

    NONE = "none"  # No sidecar seen, no app edits
    EXTERNAL_SIDECAR = "external_sidecar"  # Sidecar authored by another tool
    APP_MANAGED = "app_managed"  # Sidecar authored by playshelf


class ThumbnailKind(Enum):
    """Origin of a video's current thumbnail."""

    LOCAL = "local"  # Image file next to the video
    GENERATED = "generated"  # Frame captured by ffmpeg
    CUSTOM = "custom"  # Uploaded by the user


class WriteTarget(Enum):
    """Persistence targets touched by a metadata update."""

    CATALOG = "catalog"
    SIDECAR = "sidecar"


@dataclass(frozen=True)
class SubtitleRef:
    """A subtitle track available for a video."""

    path: str
    language: str
    label: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"path": self.path, "language": self.language, "label": self.label}


@dataclass
class VideoRecord:
    """Database record for videos table."""

    id: str
    display_name: str
    filename: str
    folder_path: str
    relative_path: str
    created_at: int  # epoch seconds
    scanned_at: str  # ISO 8601
    views: int = 0
    is_favorite: bool = False
    playback_position: float | None = None
    duration: float | None = None
    thumbnail: str | None = None
    thumbnail_kind: ThumbnailKind | None = None
    subtitles: list[SubtitleRef] = field(default_factory=list)
    channel_avatar: str | None = None
    # Editable metadata
    title: str | None = None
    release_date: str | None = None
    tags: str | None = None
    description: str | None = None
    channel: str | None = None
    external_id: str | None = None
    metadata_provenance: MetadataProvenance = MetadataProvenance.NONE
    user_edited_fields: list[str] = field(default_factory=list)
    is_hidden: bool = False

    @property
    def stem(self) -> str:
        """Filename without its extension."""
        name, _, ext = self.filename.rpartition(".")
        return name if name and ext else self.filename

    def editable_values(self) -> dict[str, str | None]:
        """Return the current editable metadata keyed by field name."""
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}


@dataclass
class PlaylistRecord:
    """Database record for playlists table, with its members."""

    id: str
    name: str
    created_at: str  # ISO 8601
    video_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "videoIds": list(self.video_ids),
        }


@dataclass
class HistoryEntry:
    """Database record for history table."""

    video_id: str
    watched_at: str  # ISO 8601
    seq: int


@dataclass
class VideoPage:
    """One page of query results plus the counts needed to stop paging."""

    items: list[VideoRecord]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Number of pages for the full result set (0 when empty)."""
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0
