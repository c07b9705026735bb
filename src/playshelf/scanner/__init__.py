"""Library scanning: discovery, asset enrichment and catalog sync.

Module organization:
- discovery.py: Walking the media root, stable ids and folder paths
- assets.py: Thumbnails, subtitles and channel avatars
- orchestrator.py: LibraryScanner, scan modes, the single-flight token
"""

from .assets import MediaAssets
from .discovery import (
    VIDEO_EXTENSIONS,
    DiscoveredFile,
    discover_videos,
    folder_path_for,
    is_hidden_path,
    video_id_for,
)
from .orchestrator import LibraryScanner, ScanMode, ScanReport, ScanState, ScanStatus

__all__ = [
    "VIDEO_EXTENSIONS",
    "DiscoveredFile",
    "LibraryScanner",
    "MediaAssets",
    "ScanMode",
    "ScanReport",
    "ScanState",
    "ScanStatus",
    "discover_videos",
    "folder_path_for",
    "is_hidden_path",
    "video_id_for",
]
