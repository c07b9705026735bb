"""API handlers for playlists.

Endpoints:
    GET /api/playlists - List playlists, newest first
    POST /api/playlists - Create a playlist
    GET /api/playlists/{playlist_id} - One playlist with its members
    POST /api/playlists/{playlist_id}/videos - Add a video
    DELETE /api/playlists/{playlist_id}/videos/{video_id} - Remove a video
"""

from __future__ import annotations

from aiohttp import web

from playshelf.db.queries import list_playlists
from playshelf.library import mutations
from playshelf.server.api.common import parse_body, run_read, run_write
from playshelf.server.api.models import PlaylistCreateRequest, VideoRefRequest
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)


@shutdown_check_middleware
@database_required_middleware
async def api_playlists_handler(request: web.Request) -> web.Response:
    """Handle GET /api/playlists."""
    playlists = await run_read(request, list_playlists)
    return web.json_response({"playlists": [p.to_dict() for p in playlists]})


@shutdown_check_middleware
@database_required_middleware
async def api_playlist_create_handler(request: web.Request) -> web.Response:
    """Handle POST /api/playlists.

    Creating "Watch Later" returns the existing Watch Later playlist.
    """
    body = await parse_body(request, PlaylistCreateRequest)
    playlist = await run_write(request, mutations.create_playlist, body.name)
    return web.json_response({"playlist": playlist.to_dict()}, status=201)


@shutdown_check_middleware
@database_required_middleware
async def api_playlist_detail_handler(request: web.Request) -> web.Response:
    """Handle GET /api/playlists/{playlist_id}."""
    playlist_id = request.match_info["playlist_id"]
    playlist = await run_read(request, mutations.require_playlist, playlist_id)
    return web.json_response({"playlist": playlist.to_dict()})


@shutdown_check_middleware
@database_required_middleware
async def api_playlist_add_handler(request: web.Request) -> web.Response:
    """Handle POST /api/playlists/{playlist_id}/videos.

    Adding a video that is already a member succeeds with ``added: false``.
    """
    playlist_id = request.match_info["playlist_id"]
    body = await parse_body(request, VideoRefRequest)
    added = await run_write(
        request, mutations.add_to_playlist, playlist_id, body.video_id
    )
    return web.json_response({"added": added})


@shutdown_check_middleware
@database_required_middleware
async def api_playlist_remove_handler(request: web.Request) -> web.Response:
    """Handle DELETE /api/playlists/{playlist_id}/videos/{video_id}.

    Removing a non-member succeeds with ``removed: false``.
    """
    playlist_id = request.match_info["playlist_id"]
    video_id = request.match_info["video_id"]
    removed = await run_write(
        request, mutations.remove_from_playlist, playlist_id, video_id
    )
    return web.json_response({"removed": removed})


def get_playlist_routes() -> list[tuple[str, str, object]]:
    """Return playlist API route definitions."""
    return [
        ("GET", "/playlists", api_playlists_handler),
        ("POST", "/playlists", api_playlist_create_handler),
        ("GET", "/playlists/{playlist_id}", api_playlist_detail_handler),
        ("POST", "/playlists/{playlist_id}/videos", api_playlist_add_handler),
        (
            "DELETE",
            "/playlists/{playlist_id}/videos/{video_id}",
            api_playlist_remove_handler,
        ),
    ]
