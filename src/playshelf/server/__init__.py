"""HTTP server for playshelf.

This module provides the aiohttp application serving the JSON API, the
health check and the media, thumbnail and subtitle assets.
"""

from playshelf.server.app import HealthStatus, create_app
from playshelf.server.lifecycle import ServerLifecycle, ShutdownState

__all__ = [
    "HealthStatus",
    "ServerLifecycle",
    "ShutdownState",
    "create_app",
]
