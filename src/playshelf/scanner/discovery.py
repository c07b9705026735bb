"""Filesystem discovery of video files under the media root."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from playshelf.db.types import ROOT_FOLDER_NAME

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "ogg", "mov", "mkv", "m4v", "avi"})


@dataclass(frozen=True)
class DiscoveredFile:
    """A video file found on disk."""

    path: Path
    relative_path: str  # POSIX, relative to the media root
    created_at: int  # epoch seconds

    @property
    def video_id(self) -> str:
        return video_id_for(self.relative_path)

    @property
    def folder_path(self) -> str:
        return folder_path_for(self.relative_path)


def video_id_for(relative_path: str) -> str:
    """Derive the stable catalog id of a file from its relative path.

    The id does not depend on where the media root lives or on any stat
    field, so it survives moving the whole library.
    """
    digest = hashlib.sha256(relative_path.encode("utf-8")).hexdigest()
    return f"vid-{digest[:32]}"


def folder_path_for(relative_path: str) -> str:
    """Return the "/"-joined folder of a relative path.

    Files directly under the media root belong to the root folder name.
    """
    parent = PurePosixPath(relative_path).parent
    return ROOT_FOLDER_NAME if str(parent) in ("", ".") else parent.as_posix()


def is_hidden_path(relative_path: str) -> bool:
    """True if any segment of the path starts with a dot."""
    return any(part.startswith(".") for part in PurePosixPath(relative_path).parts)


def is_video_file(name: str) -> bool:
    _, dot, ext = name.rpartition(".")
    return bool(dot) and ext.lower() in VIDEO_EXTENSIONS


def _created_at(stat: os.stat_result) -> int:
    # Birth time where the platform records it, modification time otherwise
    return int(getattr(stat, "st_birthtime", None) or stat.st_mtime)


def discover_videos(
    root: Path, *, hide_hidden: bool = True
) -> tuple[list[DiscoveredFile], list[tuple[str, str]]]:
    """Walk the media root and collect video files.

    Unreadable directories and files that vanish mid-walk are recorded as
    errors and skipped.

    Args:
        root: Media root directory.
        hide_hidden: Prune files and directories whose name starts with ".".

    Returns:
        Tuple of (discovered files sorted by relative path, errors as
        (path, message) pairs).
    """
    files: list[DiscoveredFile] = []
    errors: list[tuple[str, str]] = []

    def on_error(error: OSError) -> None:
        path = error.filename or str(root)
        logger.warning("Cannot read %s: %s", path, error.strerror or error)
        errors.append((str(path), error.strerror or str(error)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        if hide_hidden:
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        dirnames.sort()

        for name in sorted(filenames):
            if hide_hidden and name.startswith("."):
                continue
            if not is_video_file(name):
                continue
            path = Path(dirpath) / name
            relative_path = path.relative_to(root).as_posix()
            try:
                relative_path.encode("utf-8")
            except UnicodeEncodeError:
                # Non-UTF-8 bytes arrive as surrogate escapes from os.walk
                shown = relative_path.encode("utf-8", "backslashreplace").decode()
                logger.warning("Skipping %s: undecodable filename", shown)
                errors.append((shown, "undecodable filename"))
                continue
            try:
                stat = path.stat()
            except OSError as e:
                logger.warning("Skipping %s: %s", path, e)
                errors.append((str(path), e.strerror or str(e)))
                continue
            files.append(
                DiscoveredFile(
                    path=path,
                    relative_path=relative_path,
                    created_at=_created_at(stat),
                )
            )

    files.sort(key=lambda f: f.relative_path)
    return files, errors
