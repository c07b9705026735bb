"""Database schema definition for playshelf.

This module contains the schema DDL and schema creation logic. The schema
defines the catalog tables, indexes and constraints.
"""

import sqlite3

SCHEMA_VERSION = 2

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

-- One row per discovered video file
CREATE TABLE IF NOT EXISTS videos (
    id TEXT PRIMARY KEY,
    display_name TEXT NOT NULL,
    filename TEXT NOT NULL,
    folder_path TEXT NOT NULL,
    relative_path TEXT UNIQUE NOT NULL,
    created_at INTEGER NOT NULL,           -- epoch seconds
    views INTEGER NOT NULL DEFAULT 0 CHECK (views >= 0),
    is_favorite INTEGER NOT NULL DEFAULT 0 CHECK (is_favorite IN (0, 1)),
    playback_position REAL,
    duration REAL,
    thumbnail TEXT,
    thumbnail_kind TEXT CHECK (thumbnail_kind IN ('local', 'generated', 'custom')),
    subtitles TEXT NOT NULL DEFAULT '[]',  -- JSON list of subtitle refs
    channel_avatar TEXT,
    title TEXT,
    release_date TEXT,
    tags TEXT,                             -- comma-delimited
    description TEXT,
    channel TEXT,
    external_id TEXT,
    metadata_provenance TEXT NOT NULL DEFAULT 'none'
        CHECK (metadata_provenance IN ('none', 'external_sidecar', 'app_managed')),
    user_edited_fields TEXT NOT NULL DEFAULT '[]',  -- JSON list of field names
    is_hidden INTEGER NOT NULL DEFAULT 0 CHECK (is_hidden IN (0, 1)),
    scanned_at TEXT NOT NULL               -- ISO 8601 UTC timestamp
);

CREATE INDEX IF NOT EXISTS idx_videos_folder ON videos(folder_path);
CREATE INDEX IF NOT EXISTS idx_videos_created ON videos(created_at);
CREATE INDEX IF NOT EXISTS idx_videos_favorite ON videos(is_favorite);

CREATE TABLE IF NOT EXISTS playlists (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL               -- ISO 8601 UTC timestamp
);

CREATE TABLE IF NOT EXISTS playlist_videos (
    playlist_id TEXT NOT NULL,
    video_id TEXT NOT NULL,
    added_at TEXT NOT NULL,                -- ISO 8601 UTC timestamp
    PRIMARY KEY (playlist_id, video_id),
    FOREIGN KEY (playlist_id) REFERENCES playlists(id) ON DELETE CASCADE,
    FOREIGN KEY (video_id) REFERENCES videos(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_playlist_videos_video ON playlist_videos(video_id);

-- Single row per watched video; seq orders most recent first
CREATE TABLE IF NOT EXISTS history (
    video_id TEXT PRIMARY KEY,
    watched_at TEXT NOT NULL,              -- ISO 8601 UTC timestamp
    seq INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (video_id) REFERENCES videos(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_history_seq ON history(seq);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL                    -- JSON encoded
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the database schema if it doesn't exist.

    Args:
        conn: An open database connection.
    """
    conn.executescript(SCHEMA_SQL)

    # Set schema version if not already set
    conn.execute(
        "INSERT OR IGNORE INTO _meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    # executescript() commits implicitly; the INSERT above reopens an
    # implicit transaction on non-autocommit connections.
    conn.commit()
