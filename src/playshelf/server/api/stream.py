"""API handler resolving a video id to its media bytes.

Endpoints:
    GET /api/stream/{video_id} - Serve the video file (byte ranges supported)
"""

from __future__ import annotations

import logging

from aiohttp import web

from playshelf.library.mutations import require_video
from playshelf.scanner import MediaAssets
from playshelf.server.api.common import run_read
from playshelf.server.api.errors import NOT_FOUND, api_error
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)

logger = logging.getLogger(__name__)


@shutdown_check_middleware
@database_required_middleware
async def api_stream_handler(request: web.Request) -> web.StreamResponse:
    """Handle GET /api/stream/{video_id}.

    The id stays valid across rescans. A catalogued file that has since
    disappeared from disk yields 404; its record is kept.
    """
    video_id = request.match_info["video_id"]
    record = await run_read(request, require_video, video_id)

    assets: MediaAssets = request.app["assets"]
    path = assets.resolve(record.relative_path)
    if not path.is_file():
        logger.info("Video %s is catalogued but missing on disk: %s", video_id, path)
        return api_error("Video file not found on disk", code=NOT_FOUND, status=404)

    return web.FileResponse(path)


def get_stream_routes() -> list[tuple[str, str, object]]:
    """Return streaming route definitions."""
    return [("GET", "/stream/{video_id}", api_stream_handler)]
