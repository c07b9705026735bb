"""Derived assets for catalogued videos.

Locates and produces the files a player needs besides the video itself:
thumbnails (local image, or a frame captured with ffmpeg), WebVTT subtitles
and the channel avatar. Everything here is best effort; a missing asset is
None or an empty list, never an error.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess  # nosec B404 - only for TimeoutExpired
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote

from playshelf.core.subprocess_utils import find_tool, run_command
from playshelf.db.types import SubtitleRef, ThumbnailKind

if TYPE_CHECKING:
    from playshelf.config.models import PlayshelfConfig

logger = logging.getLogger(__name__)

THUMBNAIL_TIMEOUT = 60

# Position of the captured frame, as a fraction of the duration
THUMBNAIL_OFFSET = 0.10

_AVATAR_RE = re.compile(
    r"^(poster|avatar|channel|folder)\.(jpg|jpeg|png|webp)$", re.IGNORECASE
)
_SRT_TIMING_RE = re.compile(r"(\d{2}:\d{2}:\d{2}),(\d{3})")


def local_thumbnail_candidates(video_path: Path) -> list[Path]:
    """Image files that may serve as a video's thumbnail, in priority order."""
    directory, stem = video_path.parent, video_path.stem
    return [
        directory / f"{stem}.jpg",
        directory / f"{stem}.png",
        directory / f"{stem}.webp",
        directory / f"{stem}-thumb.jpg",
        directory / "thumbnail.jpg",
        directory / "cover.jpg",
    ]


def srt_to_vtt(text: str) -> str:
    """Convert SubRip subtitle text to WebVTT."""
    body = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    lines = [
        _SRT_TIMING_RE.sub(r"\1.\2", line) if "-->" in line else line
        for line in body.split("\n")
    ]
    return "WEBVTT\n\n" + "\n".join(lines).strip() + "\n"


def subtitle_language(filename: str) -> tuple[str, str]:
    """Return (language code, label) from a subtitle filename.

    ``Movie.fr.srt`` is French ("fr", "FR"); anything without a two-letter
    segment before the extension is English.
    """
    parts = filename.split(".")
    if len(parts) > 2 and len(parts[-2]) == 2 and parts[-2].isalpha():
        code = parts[-2].lower()
        return code, code.upper()
    return "en", "English"


@dataclass
class MediaAssets:
    """Asset lookup and generation bound to one media root and data dir."""

    media_root: Path
    thumbnails_dir: Path
    subtitles_dir: Path
    ffmpeg_path: Path | None = None
    generate_thumbnails: bool = True

    @classmethod
    def from_config(cls, config: PlayshelfConfig) -> MediaAssets:
        """Bind assets to the configured media root, data dir and ffmpeg."""
        return cls(
            media_root=config.library.media_dir.expanduser().resolve(),
            thumbnails_dir=config.thumbnails_dir,
            subtitles_dir=config.subtitles_dir,
            ffmpeg_path=find_tool("ffmpeg", config.tools.ffmpeg),
            generate_thumbnails=config.library.generate_thumbnails,
        )

    def ensure_dirs(self) -> None:
        self.thumbnails_dir.mkdir(parents=True, exist_ok=True)
        self.subtitles_dir.mkdir(parents=True, exist_ok=True)

    def media_url(self, path: Path) -> str:
        """Public URL of a file below the media root."""
        relative = path.relative_to(self.media_root).as_posix()
        return "/media/" + "/".join(quote(part) for part in relative.split("/"))

    def resolve(self, relative_path: str) -> Path:
        return self.media_root.joinpath(*relative_path.split("/"))

    # -- thumbnails -----------------------------------------------------

    def find_local_thumbnail(self, video_path: Path) -> str | None:
        """URL of the first local thumbnail candidate that exists."""
        for candidate in local_thumbnail_candidates(video_path):
            if candidate.is_file():
                return self.media_url(candidate)
        return None

    def generate_thumbnail(
        self, video_path: Path, video_id: str, duration: float | None = None
    ) -> str | None:
        """Capture one frame into the thumbnails directory.

        A previously generated frame is reused. Returns None when generation
        is disabled, ffmpeg is unavailable, or capture fails.
        """
        filename = f"{video_id}.jpg"
        output = self.thumbnails_dir / filename
        url = f"/thumbnails/{filename}"

        if output.is_file() and output.stat().st_size > 0:
            return url
        if not self.generate_thumbnails or self.ffmpeg_path is None:
            return None

        offset = (duration or 0.0) * THUMBNAIL_OFFSET
        self.thumbnails_dir.mkdir(parents=True, exist_ok=True)
        try:
            _, stderr, returncode = run_command(
                [
                    self.ffmpeg_path,
                    "-hide_banner",
                    "-loglevel",
                    "error",
                    "-y",
                    "-ss",
                    f"{offset:.3f}",
                    "-i",
                    video_path,
                    "-frames:v",
                    "1",
                    "-vf",
                    "scale=1280:-2",
                    output,
                ],
                timeout=THUMBNAIL_TIMEOUT,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.warning("Thumbnail capture failed for %s: %s", video_path, e)
            output.unlink(missing_ok=True)
            return None

        if returncode != 0 or not output.is_file() or output.stat().st_size == 0:
            logger.warning(
                "Thumbnail capture failed for %s: %s", video_path, stderr.strip()
            )
            output.unlink(missing_ok=True)
            return None
        return url

    def default_thumbnail(
        self, video_path: Path, video_id: str, duration: float | None = None
    ) -> tuple[str | None, ThumbnailKind | None]:
        """Local image if present, otherwise a generated frame."""
        local = self.find_local_thumbnail(video_path)
        if local:
            return local, ThumbnailKind.LOCAL
        generated = self.generate_thumbnail(video_path, video_id, duration)
        if generated:
            return generated, ThumbnailKind.GENERATED
        return None, None

    # -- subtitles ------------------------------------------------------

    def process_subtitles(self, video_path: Path, video_id: str) -> list[SubtitleRef]:
        """Publish sibling ``{stem}*.srt|.vtt`` files as WebVTT.

        One track per language; the first file found for a language wins.
        """
        stem = video_path.stem
        try:
            siblings = sorted(p for p in video_path.parent.iterdir() if p.is_file())
        except OSError as e:
            logger.warning("Cannot list subtitles next to %s: %s", video_path, e)
            return []

        refs: list[SubtitleRef] = []
        languages: set[str] = set()
        for source in siblings:
            suffix = source.suffix.lower()
            if suffix not in (".srt", ".vtt"):
                continue
            # "Ep1.srt" or "Ep1.fr.srt", never "Ep10.srt"
            if source.stem != stem and not source.name.startswith(f"{stem}."):
                continue
            language, label = subtitle_language(source.name)
            if language in languages:
                continue

            filename = f"{video_id}-{language}.vtt"
            target = self.subtitles_dir / filename
            try:
                self.subtitles_dir.mkdir(parents=True, exist_ok=True)
                if suffix == ".vtt":
                    shutil.copyfile(source, target)
                else:
                    text = source.read_text(encoding="utf-8", errors="replace")
                    target.write_text(srt_to_vtt(text), encoding="utf-8")
            except OSError as e:
                logger.warning("Failed to process subtitle %s: %s", source, e)
                continue

            languages.add(language)
            refs.append(
                SubtitleRef(
                    path=f"/subtitles/{filename}", language=language, label=label
                )
            )
        return refs

    # -- channel avatar -------------------------------------------------

    def find_channel_avatar(self, directory: Path) -> str | None:
        """Walk from directory up to the media root looking for an avatar image."""
        root = self.media_root
        current = directory
        while current == root or root in current.parents:
            try:
                names = sorted(p.name for p in current.iterdir())
            except OSError as e:
                logger.debug("Cannot list %s for avatar lookup: %s", current, e)
                names = []
            for name in names:
                if _AVATAR_RE.match(name):
                    return self.media_url(current / name)
            if current == root:
                break
            current = current.parent
        return None
