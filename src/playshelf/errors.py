"""Exception types shared across playshelf.

Callers catch these at the HTTP and CLI boundaries and translate them into
error codes or exit statuses.
"""

from __future__ import annotations


class PlayshelfError(Exception):
    """Base class for playshelf errors."""


class NotFoundError(PlayshelfError):
    """Raised when a query or mutation targets a record that does not exist."""

    resource = "Resource"

    def __init__(self, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__(f"{self.resource} not found: {resource_id}")


class VideoNotFoundError(NotFoundError):
    """No video with the requested id."""

    resource = "Video"


class PlaylistNotFoundError(NotFoundError):
    """No playlist with the requested id."""

    resource = "Playlist"


class ScanAlreadyRunningError(PlayshelfError):
    """Raised when a scan is requested while another one is in flight.

    This is an expected condition, not a failure. Callers may ignore it or
    retry later.
    """

    def __init__(self) -> None:
        super().__init__("A library scan is already running")


class SidecarWriteError(PlayshelfError):
    """Raised when a self-authored sidecar file cannot be written."""


class InvalidSettingError(PlayshelfError):
    """Raised when a setting value has the wrong type."""
