"""NFO sidecar discovery, parsing and writing.

Sidecars are Kodi-style XML files named ``{stem}.nfo`` next to the video.
Files written by playshelf carry a ``generator`` attribute on the root
element so they can be told apart from sidecars authored by other tools.
"""

from __future__ import annotations

import html
import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET  # nosec B405 - local files, no entity expansion
from dataclasses import dataclass, fields
from pathlib import Path

from playshelf.errors import SidecarWriteError

logger = logging.getLogger(__name__)

GENERATOR = "playshelf"

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)


@dataclass(frozen=True)
class SidecarMetadata:
    """Editable metadata read from an NFO sidecar."""

    title: str | None = None
    release_date: str | None = None
    tags: str | None = None
    description: str | None = None
    channel: str | None = None
    external_id: str | None = None
    app_authored: bool = False

    def values(self) -> dict[str, str | None]:
        """Return the metadata values keyed by editable field name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "app_authored"
        }


def find_sidecar(video_path: Path) -> Path | None:
    """Find ``{stem}.nfo`` next to a video, ignoring case.

    Args:
        video_path: Path to the video file.

    Returns:
        Path to the sidecar, or None if absent or the directory is unreadable.
    """
    wanted = f"{video_path.stem}.nfo".casefold()
    try:
        with os.scandir(video_path.parent) as entries:
            for entry in entries:
                if entry.name.casefold() == wanted and entry.is_file():
                    return Path(entry.path)
    except OSError as e:
        logger.debug("Cannot list %s for sidecar lookup: %s", video_path.parent, e)
    return None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _date_part(value: str | None) -> str | None:
    value = _clean(value)
    if value is None:
        return None
    return value.split()[0].split("T")[0]


def _join_tags(values: list[str]) -> str | None:
    seen: list[str] = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if part and part not in seen:
                seen.append(part)
    return ", ".join(seen) if seen else None


def _from_tree(root: ET.Element) -> SidecarMetadata:
    def text(*tags: str) -> str | None:
        for tag in tags:
            for element in root.iter(tag):
                value = _clean(element.text)
                if value:
                    return value
        return None

    unique_ids = [e for e in root.iter("uniqueid") if _clean(e.text)]
    default_ids = [e for e in unique_ids if e.get("default") == "true"]
    external_id = (
        _clean((default_ids or unique_ids)[0].text) if unique_ids else text("id")
    )

    return SidecarMetadata(
        title=text("title"),
        description=text("plot"),
        channel=text("showtitle", "studio"),
        tags=_join_tags(
            [e.text for tag in ("genre", "tag") for e in root.iter(tag) if e.text]
        ),
        release_date=_date_part(text("aired", "premiered")),
        external_id=external_id,
        app_authored=root.get("generator") == GENERATOR,
    )


def _decode(raw: str) -> str | None:
    return _clean(html.unescape(_CDATA_RE.sub(r"\1", raw)))


def _from_text(content: str) -> SidecarMetadata | None:
    """Lenient tag extraction for sidecars that are not well-formed XML."""

    def extract_all(tag: str) -> list[str]:
        pattern = re.compile(rf"<{tag}(?:\s[^>]*)?>([\s\S]*?)</{tag}>", re.IGNORECASE)
        return [v for v in (_decode(m) for m in pattern.findall(content)) if v]

    def first(*tags: str) -> str | None:
        for tag in tags:
            found = extract_all(tag)
            if found:
                return found[0]
        return None

    metadata = SidecarMetadata(
        title=first("title"),
        description=first("plot"),
        channel=first("showtitle", "studio"),
        tags=_join_tags(extract_all("genre") + extract_all("tag")),
        release_date=_date_part(first("aired", "premiered")),
        external_id=first("uniqueid", "id"),
        app_authored=f'generator="{GENERATOR}"' in content,
    )
    if not any(metadata.values().values()):
        return None
    return metadata


def parse_nfo(path: Path) -> SidecarMetadata | None:
    """Parse an NFO sidecar.

    Well-formed XML is read with ElementTree. Anything else falls back to
    lenient tag extraction. Unreadable files and content with no
    recognizable tags are treated as absent.

    Args:
        path: Path to the sidecar file.

    Returns:
        SidecarMetadata, or None if the sidecar is unreadable or malformed.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read sidecar %s: %s", path, e)
        return None

    if not content.strip():
        logger.warning("Ignoring empty sidecar %s", path)
        return None

    try:
        root = ET.fromstring(content)  # nosec B314 - trusted local file
    except ET.ParseError as e:
        logger.debug(
            "Sidecar %s is not well-formed XML (%s), using lenient parse", path, e
        )
        metadata = _from_text(content)
        if metadata is None:
            logger.warning("Ignoring malformed sidecar %s", path)
        return metadata

    return _from_tree(root)


def build_nfo(values: dict[str, str | None]) -> bytes:
    """Serialize editable metadata as an ``<episodedetails>`` document."""
    root = ET.Element("episodedetails", {"generator": GENERATOR})
    if values.get("title"):
        ET.SubElement(root, "title").text = values["title"]
    if values.get("channel"):
        ET.SubElement(root, "showtitle").text = values["channel"]
    if values.get("description"):
        ET.SubElement(root, "plot").text = values["description"]
    if values.get("release_date"):
        ET.SubElement(root, "aired").text = values["release_date"]
    for tag in (values.get("tags") or "").split(","):
        if tag.strip():
            ET.SubElement(root, "tag").text = tag.strip()
    if values.get("external_id"):
        uniqueid = ET.SubElement(root, "uniqueid", {"default": "true"})
        uniqueid.text = values["external_id"]
    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def write_nfo(path: Path, values: dict[str, str | None]) -> None:
    """Atomically write an app-authored sidecar.

    The document is written to a temporary file in the same directory and
    moved into place, so readers never observe a partial file.

    Args:
        path: Destination sidecar path.
        values: Editable metadata keyed by field name.

    Raises:
        SidecarWriteError: If the file cannot be written.
    """
    payload = build_nfo(values)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise SidecarWriteError(f"Cannot write sidecar {path}: {e}") from e

    logger.info("Wrote sidecar %s", path)
