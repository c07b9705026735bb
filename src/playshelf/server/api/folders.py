"""API handler for folder browsing.

Endpoints:
    GET /api/folders - Top-level folders, or the children of ``parent``
"""

from __future__ import annotations

import sqlite3

from aiohttp import web

from playshelf.db.views import get_folder_thumbnails
from playshelf.library.folders import FolderEntry, parent_folder, resolve_folders
from playshelf.server.api.common import run_read
from playshelf.server.api.models import FolderQueryParams
from playshelf.server.api.videos import resolve_hide_hidden
from playshelf.server.middleware import (
    database_required_middleware,
    shutdown_check_middleware,
)


def _list_folders(
    conn: sqlite3.Connection, params: FolderQueryParams
) -> list[FolderEntry]:
    rows = get_folder_thumbnails(
        conn,
        parent=params.parent,
        hide_hidden=resolve_hide_hidden(conn, params.hide_hidden),
    )
    return resolve_folders(rows, params.parent)


@shutdown_check_middleware
@database_required_middleware
async def api_folders_handler(request: web.Request) -> web.Response:
    """Handle GET /api/folders.

    Query parameters:
        parent: Folder whose direct children are listed (default: top level)
        hideHidden: Override the hideHiddenFiles setting

    Returns:
        ``{"folders": [...], "parent": ..., "up": ...}`` where ``up`` is the
        folder one level above ``parent`` (null at the top level).
    """
    params = FolderQueryParams.from_query(request.query)
    folders = await run_read(request, _list_folders, params)

    return web.json_response(
        {
            "folders": [f.to_dict() for f in folders],
            "parent": params.parent,
            "up": parent_folder(params.parent) if params.parent else None,
        }
    )


def get_folder_routes() -> list[tuple[str, str, object]]:
    """Return folder API route definitions."""
    return [("GET", "/folders", api_folders_handler)]
