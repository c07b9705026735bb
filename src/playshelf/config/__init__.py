"""Configuration for playshelf.

Module organization:
- models.py: Configuration dataclasses
- env.py: Typed environment variable reader
- builder.py: Source layering (file < env < CLI)
- loader.py: Config file loading and get_config()
- logging_factory.py: CLI overrides for logging settings
"""

from playshelf.config.builder import ConfigBuilder, ConfigSource
from playshelf.config.env import EnvReader
from playshelf.config.loader import (
    TomlParseError,
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from playshelf.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from playshelf.config.models import (
    LibraryConfig,
    LoggingConfig,
    PlayshelfConfig,
    ServerConfig,
    ToolPathsConfig,
)

__all__ = [
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "LibraryConfig",
    "LoggingConfig",
    "PlayshelfConfig",
    "ServerConfig",
    "TomlParseError",
    "ToolPathsConfig",
    "build_logging_config",
    "configure_logging_from_cli",
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
]
