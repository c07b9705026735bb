"""Tests for the scan endpoints."""

import asyncio
from pathlib import Path

from aiohttp import web

from playshelf.scanner import ScanMode


async def wait_for_scans(app: web.Application) -> None:
    tasks = list(app["scan_tasks"])
    if tasks:
        await asyncio.gather(*tasks)


class TestScanApi:
    async def test_starts_scan(
        self, client, app: web.Application, media_root: Path
    ) -> None:
        (media_root / "a.mp4").write_bytes(b"\x00")

        response = await client.post("/api/scan", json={"mode": "full"})
        assert response.status == 202
        assert await response.json() == {"status": "accepted", "mode": "full"}
        await wait_for_scans(app)

        status = await (await client.get("/api/scan")).json()
        assert status["state"] == "idle"
        assert status["lastReport"]["mode"] == "full"
        assert status["lastReport"]["filesNew"] == 1

        videos = await (await client.get("/api/videos")).json()
        assert videos["pagination"]["totalCount"] == 1

    async def test_default_mode_is_quick(self, client, app: web.Application) -> None:
        response = await client.post("/api/scan")
        assert (await response.json())["mode"] == "quick"
        await wait_for_scans(app)

    async def test_conflict_while_running(
        self, client, app: web.Application
    ) -> None:
        """A second scan is rejected, not queued."""
        scanner = app["scanner"]
        scanner.status.begin(ScanMode.QUICK)
        try:
            response = await client.post("/api/scan", json={"mode": "quick"})
            assert response.status == 409
            body = await response.json()
            assert body["status"] == "already_running"
            assert body["code"] == "SCAN_ALREADY_RUNNING"

            status = await (await client.get("/api/scan")).json()
            assert status["state"] == "scanning"
        finally:
            scanner.status.finish(None)

    async def test_invalid_mode(self, client) -> None:
        response = await client.post("/api/scan", json={"mode": "deep"})
        assert response.status == 400
        assert (await response.json())["code"] == "VALIDATION_FAILED"
