"""Configuration data models.

This module defines dataclasses for playshelf configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_DIR = Path.home() / ".playshelf"


@dataclass
class LibraryConfig:
    """Configuration for the media library."""

    # Root directory scanned for videos (created if missing)
    media_dir: Path = field(default_factory=lambda: Path("media"))

    # Capture a frame when no local thumbnail exists
    generate_thumbnails: bool = True


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class ServerConfig:
    """Configuration for `playshelf serve`.

    Controls bind address, port, and shutdown behavior.
    """

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost."""

    port: int = 8421
    """Port number for HTTP server."""

    shutdown_timeout: float = 30.0
    """Seconds to wait for graceful shutdown before cancelling tasks."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class PlayshelfConfig:
    """Main configuration container for playshelf.

    Aggregates all configuration sections.
    """

    library: LibraryConfig = field(default_factory=LibraryConfig)
    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Holds the catalog, generated thumbnails and converted subtitles
    data_dir: Path = DEFAULT_DATA_DIR

    # Database path (None = data_dir/library.db)
    database_path: Path | None = None

    # Seconds to wait on a locked database
    db_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.db_timeout <= 0:
            raise ValueError(f"db_timeout must be positive, got {self.db_timeout}")

    @property
    def resolved_database_path(self) -> Path:
        return self.database_path or self.data_dir / "library.db"

    @property
    def thumbnails_dir(self) -> Path:
        return self.data_dir / "thumbnails"

    @property
    def subtitles_dir(self) -> Path:
        return self.data_dir / "subtitles"
