"""Tests for error mapping and handler guard middleware."""

import sqlite3

import pytest_asyncio
from aiohttp import web

from playshelf.db.connection import DatabaseLockedError
from playshelf.errors import (
    InvalidSettingError,
    ScanAlreadyRunningError,
    SidecarWriteError,
    VideoNotFoundError,
)
from playshelf.server.api.errors import RequestError
from playshelf.server.lifecycle import ServerLifecycle
from playshelf.server.middleware import (
    database_required_middleware,
    error_middleware,
    shutdown_check_middleware,
)

RAISES = {
    "request": RequestError("bad", code="INVALID_REQUEST", details={"f": 1}),
    "missing": VideoNotFoundError("vid-x"),
    "setting": InvalidSettingError("nope"),
    "scan": ScanAlreadyRunningError(),
    "sidecar": SidecarWriteError("disk full"),
    "locked": DatabaseLockedError("locked"),
    "crash": sqlite3.OperationalError("boom"),
}


async def raising_handler(request: web.Request) -> web.Response:
    raise RAISES[request.match_info["kind"]]


@shutdown_check_middleware
@database_required_middleware
async def guarded_handler(request: web.Request) -> web.Response:
    return web.json_response({"pool": request["connection_pool"] is not None})


class _FakePool:
    is_closed = False


@pytest_asyncio.fixture
async def guard_client(aiohttp_client):
    app = web.Application(middlewares=[error_middleware])
    app["lifecycle"] = ServerLifecycle()
    app["connection_pool"] = _FakePool()
    app.router.add_get("/raise/{kind}", raising_handler)
    app.router.add_get("/guarded", guarded_handler)
    app.router.add_get("/missing", _not_found)
    return await aiohttp_client(app)


async def _not_found(request: web.Request) -> web.Response:
    raise web.HTTPNotFound()


class TestErrorMiddleware:
    async def test_request_error(self, guard_client) -> None:
        response = await guard_client.get("/raise/request")
        assert response.status == 400
        assert await response.json() == {
            "error": "bad",
            "code": "INVALID_REQUEST",
            "details": {"f": 1},
        }

    async def test_status_mapping(self, guard_client) -> None:
        expected = {
            "missing": (404, "NOT_FOUND"),
            "setting": (400, "VALIDATION_FAILED"),
            "scan": (409, "SCAN_ALREADY_RUNNING"),
            "sidecar": (500, "SIDECAR_WRITE_FAILED"),
            "locked": (503, "DATABASE_UNAVAILABLE"),
        }
        for kind, (status, code) in expected.items():
            response = await guard_client.get(f"/raise/{kind}")
            assert response.status == status, kind
            assert (await response.json())["code"] == code

    async def test_unexpected_error_is_hidden(self, guard_client) -> None:
        """Internal details never leak into the response."""
        response = await guard_client.get("/raise/crash")
        assert response.status == 500
        body = await response.json()
        assert body == {"error": "Internal server error", "code": "INTERNAL_ERROR"}

    async def test_http_exceptions_pass_through(self, guard_client) -> None:
        response = await guard_client.get("/missing")
        assert response.status == 404


class TestGuards:
    async def test_passes_pool_to_handler(self, guard_client) -> None:
        response = await guard_client.get("/guarded")
        assert await response.json() == {"pool": True}

    async def test_shutting_down(self, guard_client) -> None:
        guard_client.app["lifecycle"].initiate_shutdown()
        response = await guard_client.get("/guarded")
        assert response.status == 503
        assert (await response.json())["code"] == "SHUTTING_DOWN"

    async def test_database_unavailable(self, guard_client) -> None:
        guard_client.app["connection_pool"].is_closed = True
        response = await guard_client.get("/guarded")
        assert response.status == 503
        assert (await response.json())["code"] == "DATABASE_UNAVAILABLE"
