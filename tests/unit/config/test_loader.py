"""Tests for config file loading and precedence."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from playshelf.config.env import EnvReader
from playshelf.config.loader import (
    TomlParseError,
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
    load_toml_file,
)
from playshelf.config.models import DEFAULT_DATA_DIR


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    path = temp_dir / "config.toml"
    path.write_text(
        """
data_dir = "/srv/playshelf"

[library]
media_dir = "/srv/videos"

[server]
port = 9000
bind = "0.0.0.0"
"""
    )
    return path


class TestPaths:
    """Tests for data dir and config path resolution."""

    def test_data_dir_default(self) -> None:
        assert get_data_dir(EnvReader(env={})) == DEFAULT_DATA_DIR

    def test_data_dir_from_env(self, temp_dir: Path) -> None:
        reader = EnvReader(env={"PLAYSHELF_DATA_DIR": str(temp_dir)})
        assert get_data_dir(reader) == temp_dir

    def test_config_path_under_data_dir(self, temp_dir: Path) -> None:
        reader = EnvReader(env={"PLAYSHELF_DATA_DIR": str(temp_dir)})
        assert get_default_config_path(reader) == temp_dir / "config.toml"

    def test_config_path_env_override(self, temp_dir: Path) -> None:
        reader = EnvReader(
            env={
                "PLAYSHELF_DATA_DIR": str(temp_dir),
                "PLAYSHELF_CONFIG_PATH": str(temp_dir / "other.toml"),
            }
        )
        assert get_default_config_path(reader) == temp_dir / "other.toml"


class TestLoadTomlFile:
    """Tests for load_toml_file()."""

    def test_missing_file_is_empty(self, temp_dir: Path) -> None:
        assert load_toml_file(temp_dir / "missing.toml") == {}

    def test_invalid_toml_lenient(self, temp_dir: Path) -> None:
        path = temp_dir / "bad.toml"
        path.write_text("[library\nmedia_dir = ")
        assert load_toml_file(path) == {}

    def test_invalid_toml_strict(self, temp_dir: Path) -> None:
        """Strict loading surfaces the parse error."""
        path = temp_dir / "bad.toml"
        path.write_text("[library\nmedia_dir = ")
        with pytest.raises(TomlParseError, match="bad.toml"):
            load_toml_file(path, strict=True)


class TestLoadConfigFile:
    """Tests for the cached loader."""

    def test_cached_until_modified(self, config_file: Path) -> None:
        first = load_config_file(config_file)
        assert load_config_file(config_file) is first

        config_file.write_text("[server]\nport = 9100\n")
        stat = config_file.stat()
        os.utime(config_file, (stat.st_atime, stat.st_mtime + 10))

        assert load_config_file(config_file)["server"]["port"] == 9100

    def test_clear_cache(self, config_file: Path) -> None:
        first = load_config_file(config_file)
        clear_config_cache()
        assert load_config_file(config_file) is not first


class TestGetConfig:
    """Tests for get_config() precedence: CLI > env > file > defaults."""

    def test_file_values(self, config_file: Path) -> None:
        config = get_config(config_path=config_file, env_reader=EnvReader(env={}))

        assert config.data_dir == Path("/srv/playshelf")
        assert config.library.media_dir == Path("/srv/videos")
        assert config.server.port == 9000

    def test_env_overrides_file(self, config_file: Path) -> None:
        reader = EnvReader(
            env={"PLAYSHELF_SERVER_PORT": "9200", "PLAYSHELF_MEDIA_DIR": "/env"}
        )
        config = get_config(config_path=config_file, env_reader=reader)

        assert config.server.port == 9200
        assert config.library.media_dir == Path("/env")
        assert config.server.bind == "0.0.0.0"

    def test_cli_overrides_env(self, config_file: Path) -> None:
        reader = EnvReader(env={"PLAYSHELF_SERVER_PORT": "9200"})
        config = get_config(
            config_path=config_file,
            server_port=9300,
            media_dir=Path("/cli"),
            env_reader=reader,
        )

        assert config.server.port == 9300
        assert config.library.media_dir == Path("/cli")

    def test_defaults_without_file(self, temp_dir: Path) -> None:
        config = get_config(
            config_path=temp_dir / "missing.toml", env_reader=EnvReader(env={})
        )
        assert config.data_dir == DEFAULT_DATA_DIR
        assert config.server.port == 8421

    def test_uses_process_environment(self, temp_dir: Path) -> None:
        """The isolated test environment points the data dir at temp_dir."""
        config = get_config()
        assert config.data_dir == temp_dir / "data"

    def test_strict_invalid_file(self, temp_dir: Path) -> None:
        path = temp_dir / "bad.toml"
        path.write_text("port = = 1")
        with pytest.raises(TomlParseError):
            get_config(config_path=path, strict=True)
