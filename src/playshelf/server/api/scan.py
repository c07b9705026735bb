"""API handlers for library scans.

Endpoints:
    POST /api/scan - Start a scan in the background
    GET /api/scan - Scan state and the last report
"""

from __future__ import annotations

from aiohttp import web

from playshelf.errors import ScanAlreadyRunningError
from playshelf.scanner import LibraryScanner, ScanMode
from playshelf.server.api.common import parse_body
from playshelf.server.api.errors import SCAN_ALREADY_RUNNING
from playshelf.server.api.models import ScanRequest
from playshelf.server.background import start_background_scan
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)


@shutdown_check_middleware
@database_required_middleware
async def api_scan_start_handler(request: web.Request) -> web.Response:
    """Handle POST /api/scan.

    Body: ``{"mode": "quick" | "full"}`` (default quick).

    Returns:
        202 when the scan was started, 409 when one is already running.
        The report is not returned; clients re-query videos afterwards.
    """
    body = await parse_body(request, ScanRequest)
    mode = ScanMode(body.mode)

    try:
        start_background_scan(request.app, mode)
    except ScanAlreadyRunningError as e:
        return web.json_response(
            {
                "status": "already_running",
                "code": SCAN_ALREADY_RUNNING,
                "error": str(e),
            },
            status=409,
        )
    return web.json_response({"status": "accepted", "mode": mode.value}, status=202)


@shutdown_check_middleware
@database_required_middleware
async def api_scan_status_handler(request: web.Request) -> web.Response:
    """Handle GET /api/scan."""
    scanner: LibraryScanner = request.app["scanner"]
    return web.json_response(scanner.status.to_dict())


def get_scan_routes() -> list[tuple[str, str, object]]:
    """Return scan API route definitions."""
    return [
        ("POST", "/scan", api_scan_start_handler),
        ("GET", "/scan", api_scan_status_handler),
    ]
