"""Standardized API error response helper.

Provides a consistent error response format with machine-readable error codes
for all API endpoints. All error responses include:
- ``error``: Human-readable error message
- ``code``: Machine-readable error code string
- ``details`` (optional): Additional context for the error

Usage:
    from playshelf.server.api.errors import api_error, INVALID_REQUEST

    return api_error("Name is required", code=INVALID_REQUEST)
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

# --- Error code constants ---

INVALID_REQUEST = "INVALID_REQUEST"
INVALID_JSON = "INVALID_JSON"
VALIDATION_FAILED = "VALIDATION_FAILED"
NOT_FOUND = "NOT_FOUND"
SCAN_ALREADY_RUNNING = "SCAN_ALREADY_RUNNING"
SIDECAR_WRITE_FAILED = "SIDECAR_WRITE_FAILED"
SHUTTING_DOWN = "SHUTTING_DOWN"
DATABASE_UNAVAILABLE = "DATABASE_UNAVAILABLE"
INTERNAL_ERROR = "INTERNAL_ERROR"


class RequestError(Exception):
    """A client error detected while reading a request.

    Raised from request parsing helpers and turned into an ``api_error``
    response by the error middleware.
    """

    def __init__(
        self, message: str, *, code: str = INVALID_REQUEST, details: Any = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


def api_error(
    message: str,
    *,
    code: str,
    status: int = 400,
    details: Any = None,
) -> web.Response:
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (use constants from this module).
        status: HTTP status code (default 400).
        details: Optional additional context (string, list, or dict).

    Returns:
        aiohttp JSON response with ``{"error": ..., "code": ...}`` body.
    """
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)
