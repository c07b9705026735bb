"""Technical metadata probing with ffprobe.

Probing is best effort: any failure yields an unknown duration and a log
line, never an exception, so cataloging is never blocked on it.
"""

from __future__ import annotations

import json
import logging
import subprocess  # nosec B404 - only for TimeoutExpired
from pathlib import Path

from playshelf.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 60


def probe_duration(ffprobe_path: Path | None, video_path: Path) -> float | None:
    """Return a video's duration in seconds, or None if it cannot be probed.

    Args:
        ffprobe_path: ffprobe executable, or None when it is not available.
        video_path: File to probe.
    """
    if ffprobe_path is None:
        return None

    try:
        stdout, stderr, returncode = run_command(
            [
                ffprobe_path,
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_format",
                video_path,
            ],
            timeout=PROBE_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.warning("ffprobe failed for %s: %s", video_path, e)
        return None

    if returncode != 0:
        logger.warning(
            "ffprobe exited %d for %s: %s", returncode, video_path, stderr.strip()
        )
        return None

    try:
        duration = float(json.loads(stdout)["format"]["duration"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError):
        logger.debug("No duration in ffprobe output for %s", video_path)
        return None

    return duration if duration > 0 else None
