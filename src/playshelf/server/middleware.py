"""Request middleware for the playshelf API.

Provides the application-wide error middleware, which turns typed
exceptions into standardized error responses, and per-handler decorators
for shutdown and database availability checks.

Usage:
    from playshelf.server.middleware import (
        database_required_middleware,
        shutdown_check_middleware,
    )

    @shutdown_check_middleware
    @database_required_middleware
    async def my_api_handler(request: web.Request) -> web.Response:
        pool = request["connection_pool"]
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps

from aiohttp import web

from playshelf.db.connection import DatabaseLockedError
from playshelf.errors import (
    InvalidSettingError,
    NotFoundError,
    ScanAlreadyRunningError,
    SidecarWriteError,
)
from playshelf.server.api.errors import (
    DATABASE_UNAVAILABLE,
    INTERNAL_ERROR,
    NOT_FOUND,
    SCAN_ALREADY_RUNNING,
    SHUTTING_DOWN,
    SIDECAR_WRITE_FAILED,
    VALIDATION_FAILED,
    RequestError,
    api_error,
)

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Map exceptions raised by handlers to ``api_error`` responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except RequestError as e:
        return api_error(e.message, code=e.code, details=e.details)
    except NotFoundError as e:
        return api_error(str(e), code=NOT_FOUND, status=404)
    except InvalidSettingError as e:
        return api_error(str(e), code=VALIDATION_FAILED)
    except ScanAlreadyRunningError as e:
        return api_error(str(e), code=SCAN_ALREADY_RUNNING, status=409)
    except SidecarWriteError as e:
        logger.error("Sidecar write failed for %s: %s", request.path, e)
        return api_error(str(e), code=SIDECAR_WRITE_FAILED, status=500)
    except DatabaseLockedError as e:
        logger.warning("Database locked while handling %s: %s", request.path, e)
        return api_error(str(e), code=DATABASE_UNAVAILABLE, status=503)
    except Exception:
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return api_error("Internal server error", code=INTERNAL_ERROR, status=500)


def shutdown_check_middleware(handler: Handler) -> Handler:
    """Decorator middleware that returns 503 if server is shutting down."""

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        lifecycle = request.app.get("lifecycle")
        if lifecycle and lifecycle.is_shutting_down:
            return api_error(
                "Service is shutting down", code=SHUTTING_DOWN, status=503
            )
        return await handler(request)

    return wrapper


def database_required_middleware(handler: Handler) -> Handler:
    """Decorator middleware that returns 503 if database is unavailable.

    Stores connection_pool in request for handler use via
    request["connection_pool"].
    """

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        pool = request.app.get("connection_pool")
        if pool is None or pool.is_closed:
            return api_error(
                "Database not available", code=DATABASE_UNAVAILABLE, status=503
            )
        request["connection_pool"] = pool
        return await handler(request)

    return wrapper
