"""Scan command for playshelf CLI."""

from __future__ import annotations

import json
import logging
import sqlite3
import sys
from pathlib import Path

import click

from playshelf.cli.exit_codes import ExitCode
from playshelf.config import get_config
from playshelf.db.connection import ConnectionPool, DatabaseLockedError
from playshelf.scanner import LibraryScanner, ScanMode, ScanReport

logger = logging.getLogger(__name__)

MAX_ERRORS_SHOWN = 5


def output_json(report: ScanReport) -> None:
    """Output scan results in JSON format."""
    click.echo(json.dumps(report.to_dict(), indent=2))


def output_human(report: ScanReport, verbose: bool) -> None:
    """Output scan results in human-readable format."""
    click.echo(f"\nScanning {report.root} ({report.mode.value})...")
    click.echo(f"  Discovered: {report.files_found:,} files")
    click.echo(f"  Added (new): {report.files_new:,}")
    click.echo(f"  Updated: {report.files_updated:,}")
    click.echo(f"  Skipped (unchanged): {report.files_skipped:,}")
    if report.files_orphaned:
        click.echo(f"  Missing on disk (kept): {report.files_orphaned:,}")

    click.echo(f"\nScan complete in {report.elapsed_seconds:.1f}s")

    if report.errors:
        error_count = len(report.errors)
        click.echo(f"\n{error_count} error(s):", err=True)
        shown = report.errors if verbose else report.errors[:MAX_ERRORS_SHOWN]
        for path, error in shown:
            click.echo(f"  {path}: {error}", err=True)
        if len(shown) < error_count:
            click.echo(
                f"  ... and {error_count - len(shown)} more (use --verbose to see all)",
                err=True,
            )


@click.command("scan")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ScanMode], case_sensitive=False),
    default=ScanMode.QUICK.value,
    show_default=True,
    help="quick adds new files only; full also refreshes catalogued files.",
)
@click.option(
    "--media-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Media root to scan (default: from config, ./media).",
)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Database path. Default: ~/.playshelf/library.db",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output results in JSON format.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Show every error.",
)
@click.pass_context
def scan_command(
    ctx: click.Context,
    mode: str,
    media_dir: Path | None,
    db_path: Path | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """Scan the media root and update the catalog.

    The media root is created if it does not exist. Files that have
    disappeared are reported but never removed from the catalog.

    Examples:

        playshelf scan

        playshelf scan --mode full --media-dir ~/Videos

        playshelf scan --json
    """
    config_path = (ctx.obj or {}).get("config_path")
    try:
        config = get_config(
            config_path=config_path, media_dir=media_dir, database_path=db_path
        )
    except ValueError as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    pool = ConnectionPool(config.resolved_database_path, timeout=config.db_timeout)
    try:
        try:
            pool.initialize()
        except (sqlite3.Error, OSError) as e:
            click.echo(
                f"Error: cannot open catalog {config.resolved_database_path}: {e}",
                err=True,
            )
            sys.exit(ExitCode.DATABASE_ERROR)

        scanner = LibraryScanner.from_config(config, pool)
        report = scanner.scan(ScanMode(mode.lower()))

    except DatabaseLockedError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo(
            "Hint: Stop the running server or use a different --db path.", err=True
        )
        sys.exit(ExitCode.DATABASE_ERROR)
    except KeyboardInterrupt:
        click.echo("\nScan aborted by user.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    finally:
        pool.close()

    if json_output:
        output_json(report)
    else:
        output_human(report, verbose)

    if report.interrupted:
        sys.exit(ExitCode.INTERRUPTED)
    if report.errors and report.files_found == 0:
        # Nothing could be read at all
        sys.exit(ExitCode.GENERAL_ERROR)
    sys.exit(ExitCode.SUCCESS)
