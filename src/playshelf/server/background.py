"""Background library scans started from the server.

A scan claims the single-flight token on the event loop, so a second
request is rejected immediately, then runs in a worker thread. Shutdown asks
the scan to stop and waits for it, bounded by the shutdown timeout.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial

from aiohttp import web

from playshelf.scanner import LibraryScanner, ScanMode

logger = logging.getLogger(__name__)


def _scan_finished(tasks: set[asyncio.Task], task: asyncio.Task) -> None:
    tasks.discard(task)
    if task.cancelled():
        logger.warning("Background scan task was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background scan failed: %s", exc, exc_info=exc)
        return
    report = task.result()
    logger.info(
        "Background %s scan finished: %d new, %d updated",
        report.mode.value,
        report.files_new,
        report.files_updated,
    )


def start_background_scan(app: web.Application, mode: ScanMode) -> asyncio.Task:
    """Start a scan without waiting for it.

    Raises:
        ScanAlreadyRunningError: If a scan is already in flight.
    """
    scanner: LibraryScanner = app["scanner"]
    scanner.status.begin(mode)
    try:
        task = asyncio.create_task(
            asyncio.to_thread(scanner.execute, mode), name=f"scan-{mode.value}"
        )
    except BaseException:
        scanner.status.finish(None)
        raise

    tasks: set[asyncio.Task] = app["scan_tasks"]
    tasks.add(task)
    task.add_done_callback(partial(_scan_finished, tasks))
    logger.info("Started background %s scan", mode.value)
    return task


async def stop_background_scans(app: web.Application, timeout: float) -> None:
    """Ask a running scan to stop and wait for it to return."""
    tasks: set[asyncio.Task] = set(app.get("scan_tasks", ()))
    if not tasks:
        return

    scanner: LibraryScanner = app["scanner"]
    scanner.status.request_stop()
    logger.info("Waiting up to %.1fs for the running scan to stop", timeout)
    _, pending = await asyncio.wait(tasks, timeout=timeout)
    if pending:
        logger.warning("Scan did not stop within %.1fs", timeout)
