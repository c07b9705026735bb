"""Folder hierarchy resolution over catalogued folder paths.

Folder paths are "/"-joined, relative to the media root. A folder scope
covers the folder itself and every descendant; ``is_under_folder`` is the
rule, and the SQL in ``playshelf.db.views`` applies the same test.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class FolderEntry:
    """A browsable folder with an optional representative image."""

    name: str
    path: str
    representative_image: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "name": self.name,
            "path": self.path,
            "image": self.representative_image,
        }


def is_under_folder(folder_path: str, selected: str) -> bool:
    """True if folder_path is selected or a descendant of it.

    >>> is_under_folder("Action/90s", "Action")
    True
    >>> is_under_folder("ActionFigures", "Action")
    False
    """
    return folder_path == selected or folder_path.startswith(selected + "/")


def parent_folder(folder: str) -> str | None:
    """Return the folder one level up, or None for a top-level folder."""
    head, sep, _ = folder.rstrip("/").rpartition("/")
    return head if sep and head else None


def _child_segment(folder_path: str, parent: str | None) -> str | None:
    if parent:
        if not folder_path.startswith(parent + "/"):
            return None
        folder_path = folder_path[len(parent) + 1 :]
    segment = folder_path.split("/", 1)[0]
    return segment or None


def child_folders(folder_paths: Iterable[str], parent: str | None = None) -> list[str]:
    """Return the distinct immediate child names below parent, sorted.

    With no parent these are the top-level folder names. Folder paths equal
    to the parent contribute nothing.
    """
    names = set()
    for folder_path in folder_paths:
        segment = _child_segment(folder_path, parent)
        if segment:
            names.add(segment)
    return sorted(names)


def resolve_folders(
    rows: Iterable[tuple[str, str | None]], parent: str | None = None
) -> list[FolderEntry]:
    """Build the child folder entries of parent from (folder_path, thumbnail) rows.

    Each child's representative image is the first non-null thumbnail among
    the rows under it, in the order given. A child without any thumbnail
    gets None.
    """
    images: dict[str, str | None] = {}
    for folder_path, thumbnail in rows:
        segment = _child_segment(folder_path, parent)
        if not segment:
            continue
        if images.get(segment) is None:
            images[segment] = thumbnail or None

    return [
        FolderEntry(
            name=name,
            path=f"{parent}/{name}" if parent else name,
            representative_image=images[name],
        )
        for name in sorted(images)
    ]
