"""CLI serve command.

This module provides the `playshelf serve` command that runs the HTTP
server until SIGTERM or SIGINT.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import sys
from pathlib import Path

import click

from playshelf.cli.exit_codes import ExitCode
from playshelf.config import get_config
from playshelf.config.models import PlayshelfConfig

logger = logging.getLogger(__name__)


def _configure_server_logging(
    log_level: str | None,
    log_format: str | None,
    log_file: Path | None,
    config_path: Path | None,
) -> None:
    """Configure logging for server mode.

    Always includes stderr so output reaches the terminal or journald.
    """
    from playshelf.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        file=log_file,
        format=log_format,
        include_stderr=True,
    )


async def run_server(config: PlayshelfConfig, *, scan_on_startup: bool = True) -> int:
    """Run the HTTP server until a shutdown signal arrives.

    Args:
        config: Resolved configuration, CLI overrides applied.
        scan_on_startup: Run a QUICK scan once the server is listening.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    from aiohttp import web

    from playshelf.server.app import create_app
    from playshelf.server.lifecycle import ServerLifecycle
    from playshelf.server.signals import (
        remove_signal_handlers,
        setup_signal_handlers,
    )

    bind = config.server.bind
    port = config.server.port

    lifecycle = ServerLifecycle(shutdown_timeout=config.server.shutdown_timeout)
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    setup_signal_handlers(loop, lifecycle, shutdown_event)

    app = create_app(config, lifecycle=lifecycle, scan_on_startup=scan_on_startup)
    if app["connection_pool"] is None:
        remove_signal_handlers(loop)
        return ExitCode.DATABASE_ERROR

    runner = web.AppRunner(app)
    await runner.setup()

    try:
        site = web.TCPSite(runner, bind, port)
        await site.start()

        logger.info(
            "playshelf started on http://%s:%d (PID %d)", bind, port, os.getpid()
        )
        logger.info("Media root: %s", app["assets"].media_root)
        logger.info("Press Ctrl+C or send SIGTERM to stop")

        await shutdown_event.wait()

        logger.info(
            "Shutdown initiated, waiting up to %.1fs for cleanup",
            config.server.shutdown_timeout,
        )
        # Brief pause for in-flight requests
        await asyncio.sleep(0.5)

    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            logger.error("Port %d is already in use", port)
            return ExitCode.ADDRESS_IN_USE
        if e.errno == errno.EADDRNOTAVAIL:
            logger.error("Cannot bind to address %s", bind)
            return ExitCode.INVALID_ARGUMENTS
        logger.error("Server error: %s", e)
        return ExitCode.GENERAL_ERROR
    finally:
        lifecycle.initiate_shutdown()
        remove_signal_handlers(loop)
        await runner.cleanup()
        logger.info("playshelf stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (default: 8421).",
)
@click.option(
    "--media-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Media root to serve and scan (default: from config, ./media).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log format: text or json (default: text).",
)
@click.option(
    "--no-scan",
    is_flag=True,
    default=False,
    help="Skip the quick scan at startup.",
)
@click.pass_context
def serve_command(
    ctx: click.Context,
    bind: str | None,
    port: int | None,
    media_dir: Path | None,
    log_format: str | None,
    no_scan: bool,
) -> None:
    """Run the playshelf HTTP server.

    Serves the JSON API under /api and /api/v1, the health endpoint at
    /health, and media, thumbnails and subtitles as static files. A quick
    scan runs at startup so new files appear without a manual rescan.

    The server binds to localhost by default. Override with --bind to
    expose it on other interfaces.

    Configuration precedence (highest to lowest):
      1. CLI flags (--bind, --port, --media-dir, ...)
      2. Environment variables (PLAYSHELF_*)
      3. Config file (--config or ~/.playshelf/config.toml)
      4. Default values

    \b
    Examples:
        playshelf serve                       # Start with defaults
        playshelf serve --port 9000           # Custom port
        playshelf serve --media-dir ~/Videos  # Different library
        playshelf serve --log-format json     # JSON logging for journald
    """
    obj = ctx.obj or {}
    config_path = obj.get("config_path")
    _configure_server_logging(
        obj.get("log_level"),
        log_format or ("json" if obj.get("log_json") else None),
        obj.get("log_file"),
        config_path,
    )

    try:
        config = get_config(
            config_path=config_path,
            media_dir=media_dir,
            server_bind=bind,
            server_port=port,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(ExitCode.CONFIG_ERROR)

    if config.server.port < 1024:
        logger.warning("Port %d is privileged and may require root", config.server.port)

    logger.info(
        "Starting playshelf (bind=%s, port=%d, timeout=%.1fs)",
        config.server.bind,
        config.server.port,
        config.server.shutdown_timeout,
    )

    try:
        exit_code = asyncio.run(run_server(config, scan_on_startup=not no_scan))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
