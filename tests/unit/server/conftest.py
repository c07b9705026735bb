"""Fixtures for server and API tests."""

from pathlib import Path
from unittest.mock import patch

import pytest
import pytest_asyncio
from aiohttp import web

from playshelf.config.models import LibraryConfig, PlayshelfConfig
from playshelf.db.queries import insert_video
from playshelf.db.types import VideoRecord
from playshelf.server.app import create_app


@pytest.fixture
def server_config(media_root: Path, temp_dir: Path) -> PlayshelfConfig:
    """Configuration rooted in the test's temporary directory."""
    return PlayshelfConfig(
        library=LibraryConfig(media_dir=media_root, generate_thumbnails=False),
        data_dir=temp_dir / "data",
    )


@pytest.fixture
def app(server_config: PlayshelfConfig):
    """Application with ffmpeg and ffprobe lookups disabled."""
    with (
        patch("playshelf.scanner.assets.find_tool", return_value=None),
        patch("playshelf.scanner.orchestrator.find_tool", return_value=None),
    ):
        app = create_app(server_config)
    yield app
    if app["connection_pool"] is not None:
        app["connection_pool"].close()


@pytest_asyncio.fixture
async def client(aiohttp_client, app: web.Application):
    return await aiohttp_client(app)


@pytest.fixture
def seed(app: web.Application, make_record):
    """Insert a catalog row, creating the file under the media root."""

    def _seed(relative_path: str, *, on_disk: bool = True, **overrides) -> VideoRecord:
        record = make_record(relative_path, **overrides)
        if on_disk:
            path = app["assets"].resolve(relative_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"0123456789" * 10)
        with app["connection_pool"].transaction() as conn:
            insert_video(conn, record)
        return record

    return _seed
