"""Tests for /api and /api/v1 route parity."""

from aiohttp import web

from playshelf.server.api.routes import API_PREFIXES


class TestVersionedRoutes:
    def test_every_route_has_both_prefixes(self, app: web.Application) -> None:
        paths = {
            resource.canonical
            for resource in app.router.resources()
            if resource.canonical.startswith("/api")
        }
        v1 = {p for p in paths if p.startswith("/api/v1/")}
        unversioned = {p.removeprefix("/api") for p in paths - v1}
        versioned = {p.removeprefix("/api/v1") for p in v1}
        assert unversioned == versioned
        assert "/videos" in versioned
        assert API_PREFIXES == ("/api", "/api/v1")

    async def test_same_response_under_v1(self, client, seed) -> None:
        seed("a.mp4")
        legacy = await (await client.get("/api/videos")).json()
        current = await (await client.get("/api/v1/videos")).json()
        assert legacy == current
