"""Request and response models for the JSON API.

Query strings are parsed leniently: invalid values fall back to defaults
and numbers are clamped. Request bodies are strict pydantic models, so
unknown or mistyped fields are rejected with VALIDATION_FAILED.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from playshelf.db.types import HistoryEntry, VideoRecord
from playshelf.db.views import DEFAULT_PAGE_SIZE, DEFAULT_SORT, MAX_PAGE_SIZE, SortKey
from playshelf.library.mutations import resume_position

MAX_SEARCH_LENGTH = 200

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _parse_bool(value: str | None) -> bool | None:
    """Parse a query flag; anything unrecognized counts as absent."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def _parse_int(value: str | None, default: int, low: int, high: int) -> int:
    try:
        parsed = int(value) if value is not None else default
    except (TypeError, ValueError):
        parsed = default
    return max(low, min(high, parsed))


def _parse_folder(value: str | None) -> str | None:
    if not value:
        return None
    folder = value.strip().strip("/")
    return folder or None


@dataclass
class VideoQueryParams:
    """Validate and parse query parameters for GET /api/videos.

    Attributes:
        page: 1-indexed page number (>= 1, default 1).
        page_size: Items per page (1-200, default 24).
        sort: Ordering; unknown values use the default.
        folder: Folder scope, including descendants.
        search: Free-text search, trimmed and capped at 200 characters.
        favorites_only: Only favorites.
        history_only: Only watched videos, most recent first.
        playlist_id: Only members of this playlist.
        hide_hidden: Exclude dot-prefixed paths; None uses the stored setting.
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort: SortKey = DEFAULT_SORT
    folder: str | None = None
    search: str | None = None
    favorites_only: bool = False
    history_only: bool = False
    playlist_id: str | None = None
    hide_hidden: bool | None = None

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> VideoQueryParams:
        """Create VideoQueryParams from request query dict."""
        search = query.get("search")
        if search:
            search = search.strip()[:MAX_SEARCH_LENGTH] or None

        playlist_id = (query.get("playlistId") or "").strip() or None

        return cls(
            page=_parse_int(query.get("page"), 1, 1, 1_000_000),
            page_size=_parse_int(
                query.get("pageSize"), DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE
            ),
            sort=SortKey.parse(query.get("sort")),
            folder=_parse_folder(query.get("folder")),
            search=search or None,
            favorites_only=bool(_parse_bool(query.get("favoritesOnly"))),
            history_only=bool(_parse_bool(query.get("historyOnly"))),
            playlist_id=playlist_id,
            hide_hidden=_parse_bool(query.get("hideHidden")),
        )


@dataclass
class FolderQueryParams:
    """Query parameters for GET /api/folders."""

    parent: str | None = None
    hide_hidden: bool | None = None

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> FolderQueryParams:
        return cls(
            parent=_parse_folder(query.get("parent")),
            hide_hidden=_parse_bool(query.get("hideHidden")),
        )


# ==========================================================================
# Request bodies
# ==========================================================================


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )


class FavoriteRequest(_RequestModel):
    """Body of POST /api/videos/{id}/favorite. No value toggles the flag."""

    is_favorite: bool | None = None


class ProgressRequest(_RequestModel):
    """Body of POST /api/videos/{id}/progress."""

    time: float = Field(allow_inf_nan=False)


class MetadataRequest(_RequestModel):
    """Body of POST /api/videos/{id}/metadata.

    Only the fields present in the body are edited. An empty string or null
    clears a field.
    """

    title: str | None = None
    release_date: str | None = None
    tags: str | None = None
    description: str | None = None
    channel: str | None = None
    external_id: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def join_tag_list(cls, v: Any) -> Any:
        """Accept tags as a list and store them comma-delimited."""
        if isinstance(v, list):
            return ", ".join(str(tag).strip() for tag in v if str(tag).strip())
        return v

    @model_validator(mode="after")
    def require_one_field(self) -> MetadataRequest:
        if not self.model_fields_set:
            raise ValueError("At least one metadata field is required")
        return self

    def edit_values(self) -> dict[str, str | None]:
        """The submitted fields keyed by catalog field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ThumbnailRequest(_RequestModel):
    """Body of POST /api/videos/{id}/thumbnail."""

    image: str = Field(min_length=1)


class ScanRequest(_RequestModel):
    """Body of POST /api/scan."""

    mode: Literal["quick", "full"] = "quick"


class PlaylistCreateRequest(_RequestModel):
    """Body of POST /api/playlists."""

    name: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Playlist name must not be blank")
        return v


class VideoRefRequest(_RequestModel):
    """Body naming one video, for playlist membership and history."""

    video_id: str = Field(min_length=1)


# ==========================================================================
# Response serialization
# ==========================================================================


def video_to_dict(record: VideoRecord) -> dict[str, Any]:
    """Serialize a VideoRecord for the API."""
    return {
        "id": record.id,
        "displayName": record.display_name,
        "filename": record.filename,
        "folderPath": record.folder_path,
        "relativePath": record.relative_path,
        "createdAtEpoch": record.created_at,
        "scannedAt": record.scanned_at,
        "viewCount": record.views,
        "isFavorite": record.is_favorite,
        "playbackPositionSeconds": record.playback_position,
        "resumePositionSeconds": resume_position(record),
        "duration": record.duration,
        "thumbnailRef": record.thumbnail,
        "thumbnailKind": record.thumbnail_kind.value if record.thumbnail_kind else None,
        "subtitleRefs": [ref.to_dict() for ref in record.subtitles],
        "channelAvatar": record.channel_avatar,
        "title": record.title,
        "releaseDate": record.release_date,
        "tags": record.tags,
        "description": record.description,
        "channel": record.channel,
        "externalId": record.external_id,
        "metadataProvenance": record.metadata_provenance.value,
        "userEditedFields": [to_camel(name) for name in record.user_edited_fields],
        "isHidden": record.is_hidden,
        "streamUrl": f"/api/stream/{record.id}",
    }


def history_entry_to_dict(entry: HistoryEntry) -> dict[str, Any]:
    return {"videoId": entry.video_id, "watchedAt": entry.watched_at}
