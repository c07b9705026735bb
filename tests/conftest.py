"""Shared test fixtures for playshelf."""

import os
import shutil
import sqlite3
import tempfile
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from playshelf.config.loader import clear_config_cache
from playshelf.db.connection import ConnectionPool, get_connection
from playshelf.db.queries import insert_video
from playshelf.db.schema import initialize_database
from playshelf.db.types import VideoRecord
from playshelf.scanner.assets import MediaAssets
from playshelf.scanner.discovery import folder_path_for, is_hidden_path, video_id_for


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def temp_db(temp_dir: Path) -> Path:
    """Create a temporary database path."""
    return temp_dir / "test_library.db"


@pytest.fixture(autouse=True)
def isolated_environment(temp_dir: Path):
    """Keep tests away from the user's ~/.playshelf and PLAYSHELF_* settings."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("PLAYSHELF_")}
    env["PLAYSHELF_DATA_DIR"] = str(temp_dir / "data")
    clear_config_cache()
    with patch.dict(os.environ, env, clear=True):
        yield
    clear_config_cache()


@pytest.fixture
def db_conn(temp_db: Path) -> Iterator[sqlite3.Connection]:
    """An initialized catalog connection."""
    with get_connection(temp_db) as conn:
        initialize_database(conn)
        yield conn


@pytest.fixture
def pool(temp_db: Path) -> Iterator[ConnectionPool]:
    """An initialized connection pool."""
    pool = ConnectionPool(temp_db, timeout=5.0)
    pool.initialize()
    yield pool
    pool.close()


@pytest.fixture
def media_root(temp_dir: Path) -> Path:
    """An empty media root."""
    root = temp_dir / "media"
    root.mkdir()
    return root


@pytest.fixture
def assets(media_root: Path, temp_dir: Path) -> MediaAssets:
    """Asset locator with frame capture disabled."""
    assets = MediaAssets(
        media_root=media_root,
        thumbnails_dir=temp_dir / "data" / "thumbnails",
        subtitles_dir=temp_dir / "data" / "subtitles",
        ffmpeg_path=None,
        generate_thumbnails=False,
    )
    assets.ensure_dirs()
    return assets


@pytest.fixture
def make_record():
    """Factory for VideoRecord instances keyed by relative path."""

    def _create(relative_path: str, **overrides) -> VideoRecord:
        filename = relative_path.rsplit("/", 1)[-1]
        values = {
            "id": video_id_for(relative_path),
            "display_name": filename.rsplit(".", 1)[0],
            "filename": filename,
            "folder_path": folder_path_for(relative_path),
            "relative_path": relative_path,
            "created_at": 1_700_000_000,
            "scanned_at": "2024-01-01T00:00:00+00:00",
            "is_hidden": is_hidden_path(relative_path),
        }
        values.update(overrides)
        return VideoRecord(**values)

    return _create


@pytest.fixture
def add_video(db_conn: sqlite3.Connection, make_record):
    """Factory inserting a video into the db_conn catalog."""

    def _add(relative_path: str, **overrides) -> VideoRecord:
        record = make_record(relative_path, **overrides)
        insert_video(db_conn, record)
        db_conn.commit()
        return record

    return _add
