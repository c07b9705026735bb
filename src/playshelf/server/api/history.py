"""API handlers for watch history.

Endpoints:
    GET /api/history - Watched videos, most recent first
    POST /api/history - Record a watch
"""

from __future__ import annotations

from aiohttp import web

from playshelf.db.queries import list_history
from playshelf.library import mutations
from playshelf.server.api.common import parse_body, run_read, run_write
from playshelf.server.api.models import VideoRefRequest, history_entry_to_dict
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)


@shutdown_check_middleware
@database_required_middleware
async def api_history_handler(request: web.Request) -> web.Response:
    """Handle GET /api/history."""
    entries = await run_read(request, list_history)
    return web.json_response(
        {
            "videoIds": [e.video_id for e in entries],
            "entries": [history_entry_to_dict(e) for e in entries],
        }
    )


@shutdown_check_middleware
@database_required_middleware
async def api_history_record_handler(request: web.Request) -> web.Response:
    """Handle POST /api/history. A re-watched video moves to the front."""
    body = await parse_body(request, VideoRefRequest)
    entry = await run_write(request, mutations.record_history, body.video_id)
    return web.json_response(history_entry_to_dict(entry))


def get_history_routes() -> list[tuple[str, str, object]]:
    """Return history API route definitions."""
    return [
        ("GET", "/history", api_history_handler),
        ("POST", "/history", api_history_record_handler),
    ]
