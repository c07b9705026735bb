"""HTTP application for the playshelf server.

This module provides the aiohttp Application with the health check
endpoint, the JSON API, static asset routes and runtime state management.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import asdict, dataclass

from aiohttp import web

from playshelf import __version__
from playshelf.config.models import PlayshelfConfig
from playshelf.db.connection import ConnectionPool
from playshelf.scanner import LibraryScanner, MediaAssets, ScanMode, ScanStatus
from playshelf.server.api.routes import setup_api_routes
from playshelf.server.background import start_background_scan, stop_background_scans
from playshelf.server.lifecycle import ServerLifecycle
from playshelf.server.middleware import error_middleware

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy', 'degraded', or 'unhealthy'."""

    database: str
    """Database connectivity: 'connected' or 'disconnected'."""

    uptime_seconds: float
    """Seconds since server startup."""

    version: str
    """playshelf version string."""

    shutting_down: bool = False
    """True if graceful shutdown is in progress."""

    scan_state: str = "idle"
    """'idle' or 'scanning'."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


HEALTH_CHECK_TIMEOUT = 5.0  # seconds


async def check_database_health(connection_pool: ConnectionPool | None) -> bool:
    """Check database connectivity using the connection pool.

    Runs SELECT 1 in a thread to avoid blocking the event loop. Times out
    after HEALTH_CHECK_TIMEOUT seconds.

    Returns:
        True if database is accessible, False otherwise.
    """
    if connection_pool is None or connection_pool.is_closed:
        return False

    def _sync_check() -> bool:
        try:
            connection_pool.execute_read("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.warning("Database error during health check: %s", e)
            return False

    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_sync_check),
            timeout=HEALTH_CHECK_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "Database health check timed out after %.1fs", HEALTH_CHECK_TIMEOUT
        )
        return False


def _open_connection_pool(config: PlayshelfConfig) -> ConnectionPool | None:
    """Open and migrate the catalog, or None if it cannot be opened."""
    db_path = config.resolved_database_path
    pool = ConnectionPool(db_path, timeout=config.db_timeout)
    try:
        pool.initialize()
    except (sqlite3.Error, OSError) as e:
        logger.error("Cannot open catalog at %s: %s", db_path, e)
        pool.close()
        return None

    logger.debug(
        "Created database connection pool for %s with timeout %.1fs",
        db_path,
        config.db_timeout,
    )
    return pool


def create_app(
    config: PlayshelfConfig,
    *,
    lifecycle: ServerLifecycle | None = None,
    scan_on_startup: bool = False,
) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        config: Resolved configuration. The media root and data directories
            are created if missing.
        lifecycle: Shutdown coordination shared with the serve command.
        scan_on_startup: Start a QUICK scan once the server is up.

    Returns:
        Configured aiohttp Application instance.
    """
    app = web.Application(middlewares=[error_middleware])

    assets = MediaAssets.from_config(config)
    assets.media_root.mkdir(parents=True, exist_ok=True)
    assets.ensure_dirs()

    pool = _open_connection_pool(config)

    app["config"] = config
    app["lifecycle"] = lifecycle or ServerLifecycle(
        shutdown_timeout=config.server.shutdown_timeout
    )
    app["connection_pool"] = pool
    app["assets"] = assets
    app["scanner"] = (
        LibraryScanner.from_config(config, pool, assets=assets, status=ScanStatus())
        if pool is not None
        else None
    )
    app["scan_tasks"] = set()

    app.router.add_get("/health", health_handler)
    setup_api_routes(app)

    # Static asset references produced by the scanner
    app.router.add_static("/media", assets.media_root, name="media")
    app.router.add_static("/thumbnails", assets.thumbnails_dir, name="thumbnails")
    app.router.add_static("/subtitles", assets.subtitles_dir, name="subtitles")

    if scan_on_startup and pool is not None:
        app.on_startup.append(_start_startup_scan)
    app.on_shutdown.append(_stop_scans)
    app.on_cleanup.append(_cleanup_connection_pool)

    return app


async def _start_startup_scan(app: web.Application) -> None:
    """Bring the catalog up to date with a QUICK scan."""
    start_background_scan(app, ScanMode.QUICK)


async def _stop_scans(app: web.Application) -> None:
    if app.get("scanner") is None:
        return
    lifecycle: ServerLifecycle = app["lifecycle"]
    timeout = (
        lifecycle.shutdown_state.remaining_seconds()
        if lifecycle.is_shutting_down
        else lifecycle.shutdown_timeout
    )
    await stop_background_scans(app, timeout)


async def _cleanup_connection_pool(app: web.Application) -> None:
    """Cleanup handler to close the connection pool on shutdown."""
    pool: ConnectionPool | None = app.get("connection_pool")
    if pool is not None:
        logger.debug("Closing database connection pool")
        pool.close()


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Returns JSON health status with appropriate HTTP status code:
    - 200: healthy (database connected, not shutting down)
    - 503: degraded/unhealthy (database disconnected or shutting down)
    """
    lifecycle: ServerLifecycle | None = request.app.get("lifecycle")
    connection_pool: ConnectionPool | None = request.app.get("connection_pool")
    scanner: LibraryScanner | None = request.app.get("scanner")

    db_connected = await check_database_health(connection_pool)

    shutting_down = lifecycle.is_shutting_down if lifecycle else False
    uptime = lifecycle.uptime_seconds if lifecycle else 0.0

    if shutting_down:
        status = "unhealthy"
    elif not db_connected:
        status = "degraded"
    else:
        status = "healthy"

    health = HealthStatus(
        status=status,
        database="connected" if db_connected else "disconnected",
        uptime_seconds=round(uptime, 1),
        version=__version__,
        shutting_down=shutting_down,
        scan_state=scanner.status.state.value if scanner else "idle",
    )

    http_status = 200 if status == "healthy" else 503
    return web.json_response(health.to_dict(), status=http_status)
