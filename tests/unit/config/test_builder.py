"""Tests for ConfigBuilder and source factories."""

from __future__ import annotations

from pathlib import Path

import pytest

from playshelf.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from playshelf.config.env import EnvReader


class TestConfigBuilder:
    """Tests for layering sources."""

    def test_defaults_when_nothing_applied(self) -> None:
        """Should produce the documented defaults."""
        config = ConfigBuilder().build(default_data_dir=Path("/data"))

        assert config.data_dir == Path("/data")
        assert config.resolved_database_path == Path("/data/library.db")
        assert config.server.port == 8421
        assert config.server.bind == "127.0.0.1"
        assert config.library.generate_thumbnails is True
        assert config.logging.level == "info"

    def test_later_sources_override(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(server_port=9000, server_bind="0.0.0.0"))
        builder.apply(ConfigSource(server_port=9100))

        config = builder.build(default_data_dir=Path("/data"))

        assert config.server.port == 9100
        assert config.server.bind == "0.0.0.0"

    def test_none_does_not_override(self) -> None:
        """None means "not specified", not "reset"."""
        builder = ConfigBuilder()
        builder.apply(ConfigSource(media_dir=Path("/videos")))
        builder.apply(ConfigSource(media_dir=None))
        config = builder.build(default_data_dir=Path("/data"))
        assert config.library.media_dir == Path("/videos")

    def test_false_overrides_true(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(generate_thumbnails=False))
        config = builder.build(default_data_dir=Path("/data"))
        assert config.library.generate_thumbnails is False

    def test_invalid_values_raise(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(server_port=70000))
        with pytest.raises(ValueError, match="port"):
            builder.build(default_data_dir=Path("/data"))


class TestSourceFromFile:
    """Tests for source_from_file()."""

    def test_maps_sections(self) -> None:
        source = source_from_file(
            {
                "data_dir": "/srv/playshelf",
                "library": {"media_dir": "/srv/videos", "generate_thumbnails": False},
                "tools": {"ffprobe": "/opt/ffprobe"},
                "server": {"port": 9000},
                "logging": {"level": "debug", "format": "json"},
            }
        )

        assert source.data_dir == Path("/srv/playshelf")
        assert source.media_dir == Path("/srv/videos")
        assert source.generate_thumbnails is False
        assert source.ffprobe_path == Path("/opt/ffprobe")
        assert source.ffmpeg_path is None
        assert source.server_port == 9000
        assert source.logging_level == "debug"
        assert source.logging_format == "json"

    def test_empty_file(self) -> None:
        assert source_from_file({}) == ConfigSource()


class TestSourceFromEnv:
    """Tests for source_from_env()."""

    def test_reads_playshelf_variables(self, temp_dir: Path) -> None:
        reader = EnvReader(
            env={
                "PLAYSHELF_MEDIA_DIR": "/videos",
                "PLAYSHELF_DATA_DIR": str(temp_dir),
                "PLAYSHELF_SERVER_PORT": "9001",
                "PLAYSHELF_GENERATE_THUMBNAILS": "no",
                "PLAYSHELF_LOG_LEVEL": "warning",
                "PLAYSHELF_DB_TIMEOUT": "5",
            }
        )
        source = source_from_env(reader)

        assert source.media_dir == Path("/videos")
        assert source.data_dir == temp_dir
        assert source.server_port == 9001
        assert source.generate_thumbnails is False
        assert source.logging_level == "warning"
        assert source.db_timeout == 5.0

    def test_tool_paths_must_exist(self, temp_dir: Path) -> None:
        """A tool path that does not exist is ignored."""
        reader = EnvReader(env={"PLAYSHELF_FFMPEG_PATH": str(temp_dir / "ffmpeg")})
        assert source_from_env(reader).ffmpeg_path is None
