"""Tests for catalog schema creation and migrations."""

import sqlite3
from pathlib import Path

import pytest

from playshelf.db.connection import get_connection
from playshelf.db.schema import (
    SCHEMA_VERSION,
    create_schema,
    get_schema_version,
    initialize_database,
)

V1_SCHEMA = """
CREATE TABLE _meta (key TEXT PRIMARY KEY, value TEXT NOT NULL);
INSERT INTO _meta (key, value) VALUES ('schema_version', '1');
CREATE TABLE videos (
    id TEXT PRIMARY KEY,
    display_name TEXT NOT NULL,
    filename TEXT NOT NULL,
    folder_path TEXT NOT NULL,
    relative_path TEXT UNIQUE NOT NULL,
    created_at INTEGER NOT NULL,
    views INTEGER NOT NULL DEFAULT 0,
    is_favorite INTEGER NOT NULL DEFAULT 0,
    playback_position REAL,
    duration REAL,
    thumbnail TEXT,
    thumbnail_kind TEXT,
    subtitles TEXT NOT NULL DEFAULT '[]',
    channel_avatar TEXT,
    title TEXT,
    release_date TEXT,
    tags TEXT,
    description TEXT,
    channel TEXT,
    external_id TEXT,
    is_hidden INTEGER NOT NULL DEFAULT 0,
    scanned_at TEXT NOT NULL
);
CREATE TABLE playlists (
    id TEXT PRIMARY KEY, name TEXT NOT NULL, created_at TEXT NOT NULL
);
CREATE TABLE playlist_videos (
    playlist_id TEXT NOT NULL,
    video_id TEXT NOT NULL,
    added_at TEXT NOT NULL,
    PRIMARY KEY (playlist_id, video_id)
);
CREATE TABLE history (video_id TEXT PRIMARY KEY, watched_at TEXT NOT NULL);
CREATE TABLE settings (key TEXT PRIMARY KEY, value TEXT NOT NULL);
"""


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}


class TestCreateSchema:
    def test_fresh_database_gets_current_version(self, temp_db: Path) -> None:
        with get_connection(temp_db) as conn:
            assert get_schema_version(conn) is None
            initialize_database(conn)
            assert get_schema_version(conn) == SCHEMA_VERSION

    def test_create_schema_is_idempotent(self, temp_db: Path) -> None:
        """Running create_schema twice leaves one version row."""
        with get_connection(temp_db) as conn:
            create_schema(conn)
            create_schema(conn)
            rows = conn.execute("SELECT COUNT(*) FROM _meta").fetchone()
            assert rows[0] == 1

    def test_views_cannot_go_negative(self, db_conn: sqlite3.Connection) -> None:
        """The views CHECK constraint rejects negative counts."""
        db_conn.execute(
            "INSERT INTO videos (id, display_name, filename, folder_path, "
            "relative_path, created_at, scanned_at) "
            "VALUES ('v', 'v', 'v.mp4', 'Local Library', 'v.mp4', 0, 'now')"
        )
        with pytest.raises(sqlite3.IntegrityError):
            db_conn.execute("UPDATE videos SET views = -1 WHERE id = 'v'")


class TestMigrateV1ToV2:
    def _make_v1(self, path: Path) -> None:
        conn = sqlite3.connect(str(path))
        conn.executescript(V1_SCHEMA)
        conn.execute(
            "INSERT INTO videos (id, display_name, filename, folder_path, "
            "relative_path, created_at, scanned_at) "
            "VALUES ('a', 'a', 'a.mp4', 'Local Library', 'a.mp4', 0, 'now')"
        )
        conn.execute(
            "INSERT INTO videos (id, display_name, filename, folder_path, "
            "relative_path, created_at, scanned_at) "
            "VALUES ('b', 'b', 'b.mp4', 'Local Library', 'b.mp4', 0, 'now')"
        )
        conn.execute(
            "INSERT INTO history VALUES ('a', '2024-01-02T00:00:00+00:00')"
        )
        conn.execute(
            "INSERT INTO history VALUES ('b', '2024-01-01T00:00:00+00:00')"
        )
        conn.commit()
        conn.close()

    def test_adds_provenance_columns(self, temp_db: Path) -> None:
        self._make_v1(temp_db)
        with get_connection(temp_db) as conn:
            initialize_database(conn)

            assert get_schema_version(conn) == 2
            assert {"metadata_provenance", "user_edited_fields"} <= _columns(
                conn, "videos"
            )
            row = conn.execute(
                "SELECT metadata_provenance, user_edited_fields FROM videos "
                "WHERE id = 'a'"
            ).fetchone()
            assert tuple(row) == ("none", "[]")

    def test_backfills_history_order(self, temp_db: Path) -> None:
        """Existing history keeps its watched_at order as seq."""
        self._make_v1(temp_db)
        with get_connection(temp_db) as conn:
            initialize_database(conn)
            rows = conn.execute("SELECT video_id FROM history ORDER BY seq DESC")
            order = [row[0] for row in rows]
        assert order == ["a", "b"]

    def test_migration_is_idempotent(self, temp_db: Path) -> None:
        from playshelf.db.schema import migrate_v1_to_v2

        self._make_v1(temp_db)
        with get_connection(temp_db) as conn:
            migrate_v1_to_v2(conn)
            migrate_v1_to_v2(conn)
            assert get_schema_version(conn) == 2
