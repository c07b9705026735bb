"""API handlers for persisted settings.

Endpoints:
    GET /api/settings - All settings, defaults included
    POST /api/settings - Update one or more settings
"""

from __future__ import annotations

import logging

from aiohttp import web

from playshelf.library.settings import get_settings, update_settings
from playshelf.server.api.common import read_json_object, run_read, run_write
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)

logger = logging.getLogger(__name__)


@shutdown_check_middleware
@database_required_middleware
async def api_settings_handler(request: web.Request) -> web.Response:
    """Handle GET /api/settings."""
    settings = await run_read(request, get_settings)
    return web.json_response({"settings": settings})


@shutdown_check_middleware
@database_required_middleware
async def api_settings_update_handler(request: web.Request) -> web.Response:
    """Handle POST /api/settings.

    Body: a JSON object of setting names to scalar values, e.g.
    ``{"hideHiddenFiles": false}``. Changes apply to the next query and scan.
    """
    values = await read_json_object(request)
    settings = await run_write(request, update_settings, values)
    logger.info("Updated settings: %s", ", ".join(sorted(values)) or "none")
    return web.json_response({"settings": settings})


def get_settings_routes() -> list[tuple[str, str, object]]:
    """Return settings API route definitions."""
    return [
        ("GET", "/settings", api_settings_handler),
        ("POST", "/settings", api_settings_update_handler),
    ]
