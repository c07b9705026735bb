"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (PLAYSHELF_*)
3. Config file (~/.playshelf/config.toml)
4. Default values

Environment variables:
- PLAYSHELF_CONFIG_PATH: Path to config file (overrides default location)
- PLAYSHELF_DATA_DIR: Data directory (overrides ~/.playshelf/)
- PLAYSHELF_DATABASE_PATH: Path to database file
- PLAYSHELF_MEDIA_DIR: Media root to scan
- PLAYSHELF_FFMPEG_PATH / PLAYSHELF_FFPROBE_PATH: Tool executables
- PLAYSHELF_GENERATE_THUMBNAILS: Capture frames when no local thumbnail
- PLAYSHELF_SERVER_BIND / PLAYSHELF_SERVER_PORT / PLAYSHELF_SERVER_SHUTDOWN_TIMEOUT
- PLAYSHELF_LOG_LEVEL / PLAYSHELF_LOG_FORMAT / PLAYSHELF_LOG_FILE
- PLAYSHELF_DB_TIMEOUT: Seconds to wait on a locked database
"""

from __future__ import annotations

import logging
import threading
import tomllib
from pathlib import Path
from typing import Any

from playshelf.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from playshelf.config.env import EnvReader
from playshelf.config.models import DEFAULT_DATA_DIR, PlayshelfConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


class TomlParseError(Exception):
    """Raised when a config file exists but is not valid TOML."""


def get_data_dir(env_reader: EnvReader | None = None) -> Path:
    """Get the playshelf data directory.

    Holds the catalog (library.db), generated thumbnails, converted
    subtitles and the default config file. Can be overridden by
    PLAYSHELF_DATA_DIR (tilde expansion supported).

    Returns:
        Path to the data directory (~/.playshelf/ by default).
    """
    reader = env_reader or EnvReader()
    return reader.get_path("PLAYSHELF_DATA_DIR", must_exist=False) or DEFAULT_DATA_DIR


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path.

    Can be overridden by PLAYSHELF_CONFIG_PATH environment variable.
    """
    reader = env_reader or EnvReader()
    env_path = reader.get_path("PLAYSHELF_CONFIG_PATH", must_exist=False)
    if env_path:
        return env_path
    return get_data_dir(reader) / CONFIG_FILENAME


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load and parse a TOML file.

    Args:
        path: Path to the TOML file.
        strict: If True, raise TomlParseError on unreadable or invalid files.

    Returns:
        Parsed dictionary. Empty dict if the file doesn't exist (or cannot
        be parsed when not strict).
    """
    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise TomlParseError(f"Failed to load config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation, so an edited file is
    picked up on the next call. Thread-safe.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise TomlParseError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    media_dir: Path | None = None,
    database_path: Path | None = None,
    server_bind: str | None = None,
    server_port: int | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> PlayshelfConfig:
    """Get playshelf configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides PLAYSHELF_CONFIG_PATH).
        media_dir: CLI override for the media root.
        database_path: CLI override for database path.
        server_bind: CLI override for the bind address.
        server_port: CLI override for the port.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.

    Returns:
        PlayshelfConfig with merged configuration.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(
        config_path or get_default_config_path(reader), strict=strict
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    builder.apply(
        ConfigSource(
            media_dir=media_dir,
            database_path=database_path,
            server_bind=server_bind,
            server_port=server_port,
        )
    )

    return builder.build(default_data_dir=DEFAULT_DATA_DIR)
