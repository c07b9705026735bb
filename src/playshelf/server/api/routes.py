"""Route registration for the JSON API.

API Versioning:
    All endpoints are available under both ``/api/`` (unversioned) and
    ``/api/v1/`` (versioned). Both prefixes resolve to the same handler.
"""

from aiohttp import web

from playshelf.server.api.folders import get_folder_routes
from playshelf.server.api.history import get_history_routes
from playshelf.server.api.playlists import get_playlist_routes
from playshelf.server.api.scan import get_scan_routes
from playshelf.server.api.settings import get_settings_routes
from playshelf.server.api.stream import get_stream_routes
from playshelf.server.api.videos import get_video_routes

__all__ = [
    "API_PREFIXES",
    "setup_api_routes",
]

API_PREFIXES = ("/api", "/api/v1")

_ROUTE_GETTERS = [
    get_video_routes,
    get_folder_routes,
    get_playlist_routes,
    get_history_routes,
    get_settings_routes,
    get_scan_routes,
    get_stream_routes,
]


def setup_api_routes(app: web.Application) -> None:
    """Register all API routes under both ``/api/`` and ``/api/v1/``.

    Args:
        app: aiohttp Application to configure.
    """
    for prefix in API_PREFIXES:
        for get_routes in _ROUTE_GETTERS:
            for method, suffix, handler in get_routes():
                app.router.add_route(method, f"{prefix}{suffix}", handler)
