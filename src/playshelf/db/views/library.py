"""Library query engine: filtered, sorted, paginated video listings."""

import logging
import sqlite3
from enum import Enum

from ..queries.helpers import _escape_like_pattern, _row_to_video_record
from ..types import VideoPage
from .helpers import _clamp_page, _clamp_page_size, _folder_scope_clause

logger = logging.getLogger(__name__)


class SortKey(Enum):
    """Supported orderings for video listings."""

    CREATED_DESC = "created_desc"
    CREATED_ASC = "created_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    VIEWS_DESC = "views_desc"
    VIEWS_ASC = "views_asc"
    DURATION_DESC = "duration_desc"
    DURATION_ASC = "duration_asc"
    RELEASE_DESC = "release_desc"
    RELEASE_ASC = "release_asc"

    @classmethod
    def parse(cls, value: str | None) -> "SortKey":
        """Parse a sort key, falling back to the default for unknown values."""
        if value:
            try:
                return cls(value.strip().lower())
            except ValueError:
                logger.debug("Unknown sort key %r, using default", value)
        return DEFAULT_SORT


DEFAULT_SORT = SortKey.CREATED_DESC

# Unknown durations and release dates sort last in both directions.
_ORDER_BY = {
    SortKey.CREATED_DESC: "v.created_at DESC",
    SortKey.CREATED_ASC: "v.created_at ASC",
    SortKey.NAME_ASC: "v.display_name COLLATE NOCASE ASC",
    SortKey.NAME_DESC: "v.display_name COLLATE NOCASE DESC",
    SortKey.VIEWS_DESC: "v.views DESC",
    SortKey.VIEWS_ASC: "v.views ASC",
    SortKey.DURATION_DESC: "v.duration IS NULL, v.duration DESC",
    SortKey.DURATION_ASC: "v.duration IS NULL, v.duration ASC",
    SortKey.RELEASE_DESC: "v.release_date IS NULL, v.release_date DESC",
    SortKey.RELEASE_ASC: "v.release_date IS NULL, v.release_date ASC",
}


def query_videos(
    conn: sqlite3.Connection,
    *,
    folder: str | None = None,
    search: str | None = None,
    favorites_only: bool = False,
    history_only: bool = False,
    playlist_id: str | None = None,
    hide_hidden: bool = False,
    sort: SortKey = DEFAULT_SORT,
    page: int | None = 1,
    page_size: int | None = None,
) -> VideoPage:
    """Return one page of videos matching every given filter.

    Filters combine with AND. Rows are ordered by the requested sort key
    with ``id`` as the final tiebreaker, so page boundaries are stable.

    When ``history_only`` is set the requested sort is ignored: history is
    always returned most recently watched first.

    Args:
        conn: Database connection.
        folder: Restrict to this folder and its descendants.
        search: Case-insensitive substring over name, filename, tags, channel.
        favorites_only: Only favorited videos.
        history_only: Only videos in the watch history.
        playlist_id: Only members of this playlist.
        hide_hidden: Exclude videos with a dot-prefixed path segment.
        sort: Ordering (ignored for history).
        page: 1-indexed page number.
        page_size: Items per page, clamped to [1, MAX_PAGE_SIZE].

    Returns:
        VideoPage with the items and the total count across all pages.
    """
    page = _clamp_page(page)
    page_size = _clamp_page_size(page_size)

    conditions: list[str] = []
    params: list[str | int] = []
    joins = ""

    if folder:
        clause, clause_params = _folder_scope_clause("v.folder_path", folder)
        conditions.append(clause)
        params.extend(clause_params)

    if search:
        pattern = f"%{_escape_like_pattern(search.strip().lower())}%"
        conditions.append(
            "(LOWER(v.display_name) LIKE ? ESCAPE '\\' OR "
            "LOWER(v.filename) LIKE ? ESCAPE '\\' OR "
            "LOWER(COALESCE(v.tags, '')) LIKE ? ESCAPE '\\' OR "
            "LOWER(COALESCE(v.channel, '')) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern] * 4)

    if favorites_only:
        conditions.append("v.is_favorite = 1")

    if playlist_id is not None:
        conditions.append(
            "EXISTS (SELECT 1 FROM playlist_videos pv "
            "WHERE pv.video_id = v.id AND pv.playlist_id = ?)"
        )
        params.append(playlist_id)

    if hide_hidden:
        conditions.append("v.is_hidden = 0")

    if history_only:
        joins = " JOIN history h ON h.video_id = v.id"
        order_by = "h.seq DESC"
    else:
        order_by = f"{_ORDER_BY[sort]}, v.id ASC"

    where_clause = ""
    if conditions:
        where_clause = " WHERE " + " AND ".join(conditions)

    count_query = "SELECT COUNT(*) FROM videos v" + joins + where_clause
    total = conn.execute(count_query, params).fetchone()[0]

    query = (
        "SELECT v.* FROM videos v"
        + joins
        + where_clause
        + f" ORDER BY {order_by} LIMIT ? OFFSET ?"
    )
    rows = conn.execute(query, [*params, page_size, (page - 1) * page_size])

    return VideoPage(
        items=[_row_to_video_record(row) for row in rows.fetchall()],
        total_count=total,
        page=page,
        page_size=page_size,
    )
