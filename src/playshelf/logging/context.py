"""Scan context for structured logging.

Carries the id of the running scan through contextvars so every log line
emitted while scanning can be correlated, including lines from worker
threads started with a copied context.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_scan_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scan_id", default=None
)


def get_scan_id() -> str | None:
    """Return the id of the scan running in this context, if any."""
    return _scan_id.get()


@contextmanager
def scan_context(scan_id: str) -> Generator[None, None, None]:
    """Context manager binding a scan id to all logging in its scope.

    Example:
        with scan_context("a1b2c3d4"):
            logger.info("Scanning")  # rendered with [scan a1b2c3d4]
    """
    token = _scan_id.set(scan_id)
    try:
        yield
    finally:
        _scan_id.reset(token)


class ScanContextFilter(logging.Filter):
    """Logging filter that injects the current scan id into log records.

    Adds ``scan_id`` for JSON output and a compact ``scan_tag`` such as
    ``[scan a1b2c3d4] `` for the text format (empty outside a scan).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        scan_id = _scan_id.get()
        record.scan_id = scan_id
        record.scan_tag = f"[scan {scan_id}] " if scan_id else ""
        return True  # Never filter out records
