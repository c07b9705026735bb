"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building PlayshelfConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from playshelf.config.env import EnvReader
from playshelf.config.models import (
    LibraryConfig,
    LoggingConfig,
    PlayshelfConfig,
    ServerConfig,
    ToolPathsConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Library
    media_dir: Path | None = None
    generate_thumbnails: bool | None = None

    # Tool paths
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # Storage
    data_dir: Path | None = None
    database_path: Path | None = None
    db_timeout: float | None = None

    # Server config
    server_bind: str | None = None
    server_port: int | None = None
    server_shutdown_timeout: float | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds PlayshelfConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build(default_data_dir)
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Non-None values from the source override existing values.
        None values are ignored (preserve existing).

        Args:
            source: Configuration source to apply.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self, default_data_dir: Path) -> PlayshelfConfig:
        """Build the final PlayshelfConfig with defaults for unset values.

        Args:
            default_data_dir: Data directory used when no source sets one.

        Returns:
            Complete PlayshelfConfig with all values resolved.
        """
        library = LibraryConfig(
            media_dir=self._get("media_dir", Path("media")),
            generate_thumbnails=self._get("generate_thumbnails", True),
        )

        tools = ToolPathsConfig(
            ffmpeg=self._get("ffmpeg_path", None),
            ffprobe=self._get("ffprobe_path", None),
        )

        server = ServerConfig(
            bind=self._get("server_bind", "127.0.0.1"),
            port=self._get("server_port", 8421),
            shutdown_timeout=self._get("server_shutdown_timeout", 30.0),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", False),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return PlayshelfConfig(
            library=library,
            tools=tools,
            server=server,
            logging=logging_config,
            data_dir=self._get("data_dir", default_data_dir),
            database_path=self._get("database_path", None),
            db_timeout=self._get("db_timeout", 30.0),
        )


def _path_or_none(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from parsed TOML config file.

    Args:
        file_config: Parsed configuration dictionary from TOML file.

    Returns:
        ConfigSource with values from the config file.
    """
    library = file_config.get("library", {})
    tools = file_config.get("tools", {})
    server = file_config.get("server", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        media_dir=_path_or_none(library.get("media_dir")),
        generate_thumbnails=library.get("generate_thumbnails"),
        ffmpeg_path=_path_or_none(tools.get("ffmpeg")),
        ffprobe_path=_path_or_none(tools.get("ffprobe")),
        data_dir=_path_or_none(file_config.get("data_dir")),
        database_path=_path_or_none(file_config.get("database_path")),
        db_timeout=file_config.get("db_timeout"),
        server_bind=server.get("bind"),
        server_port=server.get("port"),
        server_shutdown_timeout=server.get("shutdown_timeout"),
        logging_level=logging_conf.get("level"),
        logging_file=_path_or_none(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from PLAYSHELF_* environment variables.

    Args:
        reader: EnvReader instance for reading environment variables.

    Returns:
        ConfigSource with values from environment variables.
    """
    return ConfigSource(
        media_dir=reader.get_path("PLAYSHELF_MEDIA_DIR", must_exist=False),
        generate_thumbnails=reader.get_bool("PLAYSHELF_GENERATE_THUMBNAILS"),
        ffmpeg_path=reader.get_path("PLAYSHELF_FFMPEG_PATH"),
        ffprobe_path=reader.get_path("PLAYSHELF_FFPROBE_PATH"),
        data_dir=reader.get_path("PLAYSHELF_DATA_DIR", must_exist=False),
        database_path=reader.get_path("PLAYSHELF_DATABASE_PATH", must_exist=False),
        db_timeout=reader.get_float("PLAYSHELF_DB_TIMEOUT"),
        server_bind=reader.get_str("PLAYSHELF_SERVER_BIND"),
        server_port=reader.get_int("PLAYSHELF_SERVER_PORT"),
        server_shutdown_timeout=reader.get_float("PLAYSHELF_SERVER_SHUTDOWN_TIMEOUT"),
        logging_level=reader.get_str("PLAYSHELF_LOG_LEVEL"),
        logging_file=reader.get_path("PLAYSHELF_LOG_FILE", must_exist=False),
        logging_format=reader.get_str("PLAYSHELF_LOG_FORMAT"),
    )
