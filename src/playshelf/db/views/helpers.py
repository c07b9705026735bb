"""Pagination helpers for view query functions."""

# Default page size for view queries when no size is specified
DEFAULT_PAGE_SIZE = 24

# Maximum allowed page size to prevent memory exhaustion
MAX_PAGE_SIZE = 200


def _clamp_page_size(page_size: int | None, max_size: int = MAX_PAGE_SIZE) -> int:
    """Clamp page size to valid range [1, max_size], defaulting to DEFAULT_PAGE_SIZE.

    Args:
        page_size: Requested page size, or None for default.
        max_size: Maximum allowed page size (default MAX_PAGE_SIZE).

    Returns:
        Clamped page size.
    """
    if page_size is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(max_size, page_size))


def _clamp_page(page: int | None) -> int:
    """Pages are 1-indexed; anything below 1 means the first page."""
    if page is None:
        return 1
    return max(1, page)


def _folder_scope_clause(column: str, folder: str) -> tuple[str, list]:
    """SQL for "column is folder or one of its descendants".

    SQLite LIKE folds ASCII case, so the descendant test compares the
    literal prefix instead; "Action" never matches "ActionFigures" or
    "action".
    """
    prefix = folder + "/"
    return (
        f"({column} = ? OR substr({column}, 1, ?) = ?)",
        [folder, len(prefix), prefix],
    )
