"""API handlers for video listing and per-video mutations.

Endpoints:
    GET /api/videos - Filtered, sorted, paginated listing
    GET /api/videos/{video_id} - One video
    POST /api/videos/{video_id}/favorite - Set or toggle the favorite flag
    POST /api/videos/{video_id}/view - Count a view
    POST /api/videos/{video_id}/progress - Save the playback position
    POST /api/videos/{video_id}/metadata - Edit metadata
    POST /api/videos/{video_id}/thumbnail - Upload a custom thumbnail
    DELETE /api/videos/{video_id}/thumbnail - Remove the custom thumbnail
    POST /api/videos/{video_id}/watch-later - Toggle Watch Later membership
"""

from __future__ import annotations

import logging
import sqlite3

from aiohttp import web

from playshelf.db.queries import get_setting
from playshelf.db.types import VideoPage
from playshelf.db.views import query_videos
from playshelf.library import mutations, thumbnails
from playshelf.metadata.reconciler import MetadataEdit
from playshelf.scanner import MediaAssets
from playshelf.server.api.common import parse_body, run_read, run_write
from playshelf.server.api.errors import VALIDATION_FAILED, RequestError
from playshelf.server.api.models import (
    FavoriteRequest,
    MetadataRequest,
    ProgressRequest,
    ThumbnailRequest,
    VideoQueryParams,
    video_to_dict,
)
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)

logger = logging.getLogger(__name__)


def resolve_hide_hidden(conn: sqlite3.Connection, requested: bool | None) -> bool:
    """An explicit request value wins; otherwise use the stored setting."""
    if requested is not None:
        return requested
    return bool(get_setting(conn, "hideHiddenFiles", True))


def _query_page(conn: sqlite3.Connection, params: VideoQueryParams) -> VideoPage:
    return query_videos(
        conn,
        folder=params.folder,
        search=params.search,
        favorites_only=params.favorites_only,
        history_only=params.history_only,
        playlist_id=params.playlist_id,
        hide_hidden=resolve_hide_hidden(conn, params.hide_hidden),
        sort=params.sort,
        page=params.page,
        page_size=params.page_size,
    )


@shutdown_check_middleware
@database_required_middleware
async def api_videos_handler(request: web.Request) -> web.Response:
    """Handle GET /api/videos.

    Query parameters:
        page, pageSize: Pagination (pageSize 1-200, default 24)
        sort: created_desc (default), created_asc, name_asc, name_desc,
            views_desc, views_asc, duration_desc, duration_asc,
            release_desc, release_asc
        folder: Folder scope, descendants included
        search: Case-insensitive substring search
        favoritesOnly, historyOnly: Boolean flags
        playlistId: Playlist membership
        hideHidden: Override the hideHiddenFiles setting
    """
    params = VideoQueryParams.from_query(request.query)
    page = await run_read(request, _query_page, params)

    return web.json_response(
        {
            "videos": [video_to_dict(v) for v in page.items],
            "pagination": {
                "page": page.page,
                "pageSize": page.page_size,
                "totalCount": page.total_count,
                "totalPages": page.total_pages,
            },
        }
    )


@shutdown_check_middleware
@database_required_middleware
async def api_video_detail_handler(request: web.Request) -> web.Response:
    """Handle GET /api/videos/{video_id}."""
    video_id = request.match_info["video_id"]
    record = await run_read(request, mutations.require_video, video_id)
    return web.json_response({"video": video_to_dict(record)})


@shutdown_check_middleware
@database_required_middleware
async def api_video_favorite_handler(request: web.Request) -> web.Response:
    """Handle POST /api/videos/{video_id}/favorite.

    With ``{"isFavorite": bool}`` the flag is set (safe to retry); with an
    empty body it is toggled.
    """
    video_id = request.match_info["video_id"]
    body = await parse_body(request, FavoriteRequest)

    if body.is_favorite is None:
        value = await run_write(request, mutations.toggle_favorite, video_id)
    else:
        value = await run_write(
            request, mutations.set_favorite, video_id, body.is_favorite
        )
    return web.json_response({"isFavorite": value})


@shutdown_check_middleware
@database_required_middleware
async def api_video_view_handler(request: web.Request) -> web.Response:
    """Handle POST /api/videos/{video_id}/view."""
    video_id = request.match_info["video_id"]
    views = await run_write(request, mutations.record_view, video_id)
    return web.json_response({"views": views})


@shutdown_check_middleware
@database_required_middleware
async def api_video_progress_handler(request: web.Request) -> web.Response:
    """Handle POST /api/videos/{video_id}/progress. A time of 0 clears it."""
    video_id = request.match_info["video_id"]
    body = await parse_body(request, ProgressRequest)
    position = await run_write(request, mutations.set_progress, video_id, body.time)
    return web.json_response({"playbackPosition": position})


@shutdown_check_middleware
@database_required_middleware
async def api_video_metadata_handler(request: web.Request) -> web.Response:
    """Handle POST /api/videos/{video_id}/metadata.

    Returns the updated video and where the edit was persisted. The
    sidecar is only written when playshelf owns it.
    """
    video_id = request.match_info["video_id"]
    body = await parse_body(request, MetadataRequest)
    edit = MetadataEdit(values=body.edit_values())
    assets: MediaAssets = request.app["assets"]

    result = await run_write(
        request,
        mutations.update_metadata,
        video_id,
        edit,
        media_root=assets.media_root,
    )
    return web.json_response(
        {
            "video": video_to_dict(result.video),
            "writeTargets": sorted(t.value for t in result.write_targets),
            "sidecarWritten": result.sidecar_written,
        }
    )


@shutdown_check_middleware
@database_required_middleware
async def api_video_thumbnail_handler(request: web.Request) -> web.Response:
    """Handle POST /api/videos/{video_id}/thumbnail.

    Body: ``{"image": "<base64 or data:image/...;base64,...>"}``
    """
    video_id = request.match_info["video_id"]
    body = await parse_body(request, ThumbnailRequest)
    try:
        image = thumbnails.decode_image_data(body.image)
    except ValueError as e:
        raise RequestError(str(e), code=VALIDATION_FAILED) from e

    assets: MediaAssets = request.app["assets"]
    url = await run_write(
        request,
        thumbnails.set_custom_thumbnail,
        video_id,
        image,
        thumbnails_dir=assets.thumbnails_dir,
    )
    return web.json_response({"thumbnail": url})


@shutdown_check_middleware
@database_required_middleware
async def api_video_thumbnail_delete_handler(request: web.Request) -> web.Response:
    """Handle DELETE /api/videos/{video_id}/thumbnail.

    Returns the fallback thumbnail, which may be null.
    """
    video_id = request.match_info["video_id"]
    assets: MediaAssets = request.app["assets"]
    url = await run_write(
        request, thumbnails.clear_custom_thumbnail, video_id, assets=assets
    )
    return web.json_response({"thumbnail": url})


def _toggle_watch_later(conn: sqlite3.Connection, video_id: str) -> tuple[bool, str]:
    in_watch_later = mutations.toggle_watch_later(conn, video_id)
    playlist = mutations.get_or_create_watch_later(conn)
    return in_watch_later, playlist.id


@shutdown_check_middleware
@database_required_middleware
async def api_video_watch_later_handler(request: web.Request) -> web.Response:
    """Handle POST /api/videos/{video_id}/watch-later."""
    video_id = request.match_info["video_id"]
    in_watch_later, playlist_id = await run_write(
        request, _toggle_watch_later, video_id
    )
    return web.json_response(
        {"inWatchLater": in_watch_later, "playlistId": playlist_id}
    )


def get_video_routes() -> list[tuple[str, str, object]]:
    """Return (method, path suffix, handler) tuples for video routes."""
    return [
        ("GET", "/videos", api_videos_handler),
        ("GET", "/videos/{video_id}", api_video_detail_handler),
        ("POST", "/videos/{video_id}/favorite", api_video_favorite_handler),
        ("POST", "/videos/{video_id}/view", api_video_view_handler),
        ("POST", "/videos/{video_id}/progress", api_video_progress_handler),
        ("POST", "/videos/{video_id}/metadata", api_video_metadata_handler),
        ("POST", "/videos/{video_id}/thumbnail", api_video_thumbnail_handler),
        ("DELETE", "/videos/{video_id}/thumbnail", api_video_thumbnail_delete_handler),
        ("POST", "/videos/{video_id}/watch-later", api_video_watch_later_handler),
    ]
