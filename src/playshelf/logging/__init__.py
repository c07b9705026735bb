"""Structured logging module for playshelf.

Provides configurable logging with JSON format support and file rotation,
plus scan context propagation.
"""

from playshelf.logging.config import configure_logging
from playshelf.logging.context import ScanContextFilter, get_scan_id, scan_context
from playshelf.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "ScanContextFilter",
    "configure_logging",
    "get_scan_id",
    "scan_context",
]
