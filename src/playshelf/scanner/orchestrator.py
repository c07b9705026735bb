"""Scanner orchestrator that coordinates discovery, enrichment and the catalog."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from playshelf.core.subprocess_utils import find_tool
from playshelf.db.connection import (
    ConnectionPool,
    DatabaseLockedError,
    handle_database_locked,
)
from playshelf.db.queries import (
    get_catalogued_paths,
    get_setting,
    get_video_by_id,
    insert_video,
    update_video,
    utc_now_iso,
)
from playshelf.db.types import SubtitleRef, ThumbnailKind, VideoRecord
from playshelf.errors import ScanAlreadyRunningError
from playshelf.logging.context import scan_context
from playshelf.metadata.nfo import SidecarMetadata, find_sidecar, parse_nfo
from playshelf.metadata.probe import probe_duration
from playshelf.metadata.reconciler import reconcile
from playshelf.scanner.assets import MediaAssets
from playshelf.scanner.discovery import DiscoveredFile, discover_videos, is_hidden_path

if TYPE_CHECKING:
    from playshelf.config.models import PlayshelfConfig

logger = logging.getLogger(__name__)


class ScanMode(Enum):
    """How much work a scan does for files already in the catalog."""

    QUICK = "quick"  # Insert new files only
    FULL = "full"  # Also re-reconcile every existing file


class ScanState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"


@dataclass
class ScanReport:
    """Result of a scan operation."""

    mode: ScanMode
    root: str
    started_at: str
    files_found: int = 0
    files_new: int = 0
    files_updated: int = 0
    files_skipped: int = 0
    files_errored: int = 0
    files_orphaned: int = 0  # Catalogued but not found on disk; never deleted
    errors: list[tuple[str, str]] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    interrupted: bool = False  # Stopped early on shutdown

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "mode": self.mode.value,
            "root": self.root,
            "startedAt": self.started_at,
            "filesFound": self.files_found,
            "filesNew": self.files_new,
            "filesUpdated": self.files_updated,
            "filesSkipped": self.files_skipped,
            "filesErrored": self.files_errored,
            "filesOrphaned": self.files_orphaned,
            "errors": [{"path": p, "message": m} for p, m in self.errors],
            "elapsedSeconds": round(self.elapsed_seconds, 3),
            "interrupted": self.interrupted,
        }


class ScanStatus:
    """Single-flight token for library scans.

    At most one scan runs at a time; a second request is rejected with
    ScanAlreadyRunningError rather than queued.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = ScanState.IDLE
        self._mode: ScanMode | None = None
        self._last_report: ScanReport | None = None
        self._stop_requested = False

    def begin(self, mode: ScanMode) -> None:
        """Claim the scanner.

        Raises:
            ScanAlreadyRunningError: If a scan is already in flight.
        """
        with self._lock:
            if self._state is ScanState.SCANNING:
                raise ScanAlreadyRunningError()
            self._state = ScanState.SCANNING
            self._mode = mode
            self._stop_requested = False

    def finish(self, report: ScanReport | None) -> None:
        """Release the scanner, keeping the report of a completed scan."""
        with self._lock:
            self._state = ScanState.IDLE
            self._mode = None
            if report is not None:
                self._last_report = report

    def request_stop(self) -> None:
        """Ask a running scan to stop after the file it is processing."""
        with self._lock:
            if self._state is ScanState.SCANNING:
                self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        with self._lock:
            return self._stop_requested

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self._state

    @property
    def is_scanning(self) -> bool:
        return self.state is ScanState.SCANNING

    @property
    def last_report(self) -> ScanReport | None:
        with self._lock:
            return self._last_report

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "mode": self._mode.value if self._mode else None,
                "lastReport": (
                    self._last_report.to_dict() if self._last_report else None
                ),
            }


@dataclass
class _Derived:
    """Enrichment computed outside the write transaction."""

    duration: float | None = None
    thumbnail: str | None = None
    thumbnail_kind: ThumbnailKind | None = None
    subtitles: list[SubtitleRef] | None = None
    channel_avatar: str | None = None


def _fill_missing(record: VideoRecord, derived: _Derived) -> VideoRecord:
    """Apply derived values only where the record has none."""
    updates: dict = {}
    if record.duration is None and derived.duration is not None:
        updates["duration"] = derived.duration
    if record.thumbnail is None and derived.thumbnail is not None:
        updates["thumbnail"] = derived.thumbnail
        updates["thumbnail_kind"] = derived.thumbnail_kind
    if not record.subtitles and derived.subtitles:
        updates["subtitles"] = derived.subtitles
    if record.channel_avatar is None and derived.channel_avatar is not None:
        updates["channel_avatar"] = derived.channel_avatar
    return replace(record, **updates) if updates else record


def _with_file_date(record: VideoRecord) -> VideoRecord:
    """Date a video by its file when neither a sidecar nor the user did."""
    if record.release_date or "release_date" in record.user_edited_fields:
        return record
    day = datetime.fromtimestamp(record.created_at, timezone.utc).date()
    return replace(record, release_date=day.isoformat())


def _read_sidecar(video_path: Path) -> SidecarMetadata | None:
    sidecar_path = find_sidecar(video_path)
    return parse_nfo(sidecar_path) if sidecar_path else None


class LibraryScanner:
    """Keeps the catalog in step with the media root."""

    def __init__(
        self,
        pool: ConnectionPool,
        assets: MediaAssets,
        *,
        ffprobe_path: Path | None = None,
        status: ScanStatus | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            pool: Catalog connection pool.
            assets: Asset locator bound to the media root.
            ffprobe_path: ffprobe executable for durations, or None.
            status: Shared scan token; a new one is created if omitted.
        """
        self.pool = pool
        self.assets = assets
        self.ffprobe_path = ffprobe_path
        self.status = status or ScanStatus()

    @classmethod
    def from_config(
        cls,
        config: PlayshelfConfig,
        pool: ConnectionPool,
        *,
        assets: MediaAssets | None = None,
        status: ScanStatus | None = None,
    ) -> LibraryScanner:
        """Create a scanner for the configured media root and tools."""
        return cls(
            pool,
            assets or MediaAssets.from_config(config),
            ffprobe_path=find_tool("ffprobe", config.tools.ffprobe),
            status=status,
        )

    @property
    def media_root(self) -> Path:
        return self.assets.media_root

    def scan(self, mode: ScanMode = ScanMode.QUICK) -> ScanReport:
        """Claim the scan token and run a scan to completion.

        Raises:
            ScanAlreadyRunningError: If another scan is in flight.
        """
        self.status.begin(mode)
        return self.execute(mode)

    def execute(self, mode: ScanMode) -> ScanReport:
        """Run a scan for a caller that already holds the scan token.

        The token is always released, even if the scan fails.
        """
        report = None
        try:
            with scan_context(uuid.uuid4().hex[:8]):
                report = self._run(mode)
            return report
        finally:
            self.status.finish(report)

    @handle_database_locked
    def _hide_hidden(self) -> bool:
        with self.pool.read_connection() as conn:
            return bool(get_setting(conn, "hideHiddenFiles", True))

    def _run(self, mode: ScanMode) -> ScanReport:
        start = time.monotonic()
        report = ScanReport(
            mode=mode, root=str(self.media_root), started_at=utc_now_iso()
        )
        logger.info("Starting %s scan of %s", mode.value, self.media_root)

        try:
            self.media_root.mkdir(parents=True, exist_ok=True)
            self.assets.ensure_dirs()
        except OSError as e:
            logger.error("Cannot prepare media root %s: %s", self.media_root, e)
            report.errors.append((str(self.media_root), e.strerror or str(e)))
            report.files_errored = len(report.errors)
            report.elapsed_seconds = time.monotonic() - start
            return report

        hide_hidden = self._hide_hidden()
        discovered, walk_errors = discover_videos(
            self.media_root, hide_hidden=hide_hidden
        )
        report.errors.extend(walk_errors)
        report.files_found = len(discovered)

        with self.pool.read_connection() as conn:
            catalogued = get_catalogued_paths(conn)

        for file in discovered:
            if self.status.stop_requested:
                logger.warning("Scan stopped before completion")
                report.interrupted = True
                break
            try:
                if file.relative_path not in catalogued:
                    if self._add(file):
                        report.files_new += 1
                    else:
                        report.files_skipped += 1
                elif mode is ScanMode.FULL and self._refresh(file):
                    report.files_updated += 1
                else:
                    report.files_skipped += 1
            except OSError as e:
                logger.warning("Skipping %s: %s", file.path, e)
                report.errors.append((str(file.path), e.strerror or str(e)))
            except (DatabaseLockedError, sqlite3.Error) as e:
                logger.error("Catalog write failed for %s: %s", file.relative_path, e)
                report.errors.append((str(file.path), str(e)))

        on_disk = {f.relative_path for f in discovered}
        orphans = [
            path
            for path in catalogued
            if path not in on_disk and not (hide_hidden and is_hidden_path(path))
        ]
        for path in orphans:
            logger.debug("Catalogued file not found on disk: %s", path)
        report.files_orphaned = len(orphans)

        report.files_errored = len(report.errors)
        report.elapsed_seconds = time.monotonic() - start
        logger.info(
            "Scan complete: %d found, %d new, %d updated, %d orphaned, %d errors "
            "in %.1fs",
            report.files_found,
            report.files_new,
            report.files_updated,
            report.files_orphaned,
            report.files_errored,
            report.elapsed_seconds,
        )
        return report

    def _derive(self, file: DiscoveredFile, existing: VideoRecord | None) -> _Derived:
        """Probe and generate whatever the record is missing (slow, no lock held)."""
        derived = _Derived()
        video_id = file.video_id

        if existing is None or existing.duration is None:
            derived.duration = probe_duration(self.ffprobe_path, file.path)
        if existing is None or existing.thumbnail is None:
            duration = derived.duration or (existing.duration if existing else None)
            derived.thumbnail, derived.thumbnail_kind = self.assets.default_thumbnail(
                file.path, video_id, duration
            )
        if existing is None or not existing.subtitles:
            derived.subtitles = self.assets.process_subtitles(file.path, video_id)
        if existing is None or existing.channel_avatar is None:
            derived.channel_avatar = self.assets.find_channel_avatar(file.path.parent)
        return derived

    @handle_database_locked
    def _add(self, file: DiscoveredFile) -> bool:
        """Catalog a new file. Returns False if it was inserted concurrently."""
        record = VideoRecord(
            id=file.video_id,
            display_name=file.path.stem,
            filename=file.path.name,
            folder_path=file.folder_path,
            relative_path=file.relative_path,
            created_at=file.created_at,
            scanned_at=utc_now_iso(),
            is_hidden=is_hidden_path(file.relative_path),
        )
        record = _fill_missing(record, self._derive(file, None))
        record = reconcile(record, _read_sidecar(file.path)).record
        record = _with_file_date(record)

        with self.pool.transaction() as conn:
            inserted = insert_video(conn, record)
        if inserted:
            logger.debug("Catalogued %s as %s", file.relative_path, record.id)
        return inserted

    @handle_database_locked
    def _refresh(self, file: DiscoveredFile) -> bool:
        """Re-reconcile an existing file. Returns True if its row changed."""
        with self.pool.read_connection() as conn:
            snapshot = get_video_by_id(conn, file.video_id)
        if snapshot is None:
            return False

        derived = self._derive(file, snapshot)
        sidecar = _read_sidecar(file.path)

        with self.pool.transaction() as conn:
            # Re-read so edits made while probing are not lost
            current = get_video_by_id(conn, file.video_id)
            if current is None:
                return False
            filled = _fill_missing(current, derived)
            filled = replace(filled, is_hidden=is_hidden_path(file.relative_path))
            result = reconcile(filled, sidecar)
            record = _with_file_date(result.record)
            if record == current:
                return False
            update_video(conn, replace(record, scanned_at=utc_now_iso()))

        logger.debug(
            "Updated %s (%s)",
            file.relative_path,
            ", ".join(result.changed_fields) or "derived data",
        )
        return True
