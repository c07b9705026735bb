"""Read-side view queries for the catalog.

Module organization:
- helpers.py: Pagination defaults and clamping
- library.py: Filtered, sorted, paginated video listings (query_videos)
- folders.py: Folder rows for the hierarchy resolver
"""

from .folders import get_folder_thumbnails
from .helpers import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .library import DEFAULT_SORT, SortKey, query_videos

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SORT",
    "MAX_PAGE_SIZE",
    "SortKey",
    "get_folder_thumbnails",
    "query_videos",
]
