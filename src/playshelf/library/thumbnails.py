"""Custom thumbnail upload and removal."""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
import sqlite3
import tempfile
from pathlib import Path

from playshelf.db import queries
from playshelf.db.types import ThumbnailKind
from playshelf.library.mutations import require_video
from playshelf.scanner.assets import MediaAssets

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)


def decode_image_data(data: str) -> bytes:
    """Decode a base64 image, with or without a ``data:image/...`` prefix.

    Raises:
        ValueError: If the payload is empty or not valid base64.
    """
    payload = _DATA_URL_RE.sub("", data.strip(), count=1)
    if not payload:
        raise ValueError("No image data")
    try:
        image = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e
    if not image:
        raise ValueError("No image data")
    return image


def custom_thumbnail_path(thumbnails_dir: Path, video_id: str) -> Path:
    return thumbnails_dir / f"{video_id}-custom.jpg"


def set_custom_thumbnail(
    conn: sqlite3.Connection,
    video_id: str,
    image_bytes: bytes,
    *,
    thumbnails_dir: Path,
) -> str:
    """Store an uploaded image as the video's thumbnail.

    Returns:
        The public URL of the stored image.
    """
    require_video(conn, video_id)

    target = custom_thumbnail_path(thumbnails_dir, video_id)
    thumbnails_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "wb", dir=thumbnails_dir, suffix=".tmp", delete=False
    ) as tmp:
        tmp.write(image_bytes)
    os.replace(tmp.name, target)

    url = f"/thumbnails/{target.name}"
    queries.set_thumbnail(conn, video_id, url, ThumbnailKind.CUSTOM)
    logger.info("Set custom thumbnail for %s", video_id)
    return url


def clear_custom_thumbnail(
    conn: sqlite3.Connection, video_id: str, *, assets: MediaAssets
) -> str | None:
    """Remove a custom thumbnail and fall back to the default one.

    The fallback is a local image next to the video, then a captured frame
    (reusing one generated earlier), then no thumbnail at all.

    Returns:
        The new thumbnail URL, or None.
    """
    record = require_video(conn, video_id)
    custom_thumbnail_path(assets.thumbnails_dir, video_id).unlink(missing_ok=True)

    video_path = assets.resolve(record.relative_path)
    url, kind = assets.default_thumbnail(video_path, video_id, record.duration)
    queries.set_thumbnail(conn, video_id, url, kind)
    logger.info("Cleared custom thumbnail for %s (fallback: %s)", video_id, url)
    return url
