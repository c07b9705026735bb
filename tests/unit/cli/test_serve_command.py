"""Tests for the serve CLI command and server runner."""

import socket
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from playshelf.cli import main
from playshelf.cli.exit_codes import ExitCode
from playshelf.cli.serve import run_server
from playshelf.config.models import LibraryConfig, PlayshelfConfig, ServerConfig


class TestServeCommand:
    """Tests for `playshelf serve` option handling."""

    def test_passes_overrides(self, media_root: Path) -> None:
        with patch(
            "playshelf.cli.serve.run_server",
            new=AsyncMock(return_value=ExitCode.SUCCESS),
        ) as mock_run:
            result = CliRunner().invoke(
                main,
                [
                    "serve",
                    "--port",
                    "9123",
                    "--bind",
                    "0.0.0.0",
                    "--media-dir",
                    str(media_root),
                    "--no-scan",
                ],
            )

        assert result.exit_code == ExitCode.SUCCESS
        config = mock_run.call_args.args[0]
        assert config.server.port == 9123
        assert config.server.bind == "0.0.0.0"
        assert config.library.media_dir == media_root
        assert mock_run.call_args.kwargs == {"scan_on_startup": False}

    def test_invalid_port(self) -> None:
        with patch("playshelf.cli.serve.run_server", new=AsyncMock()) as mock_run:
            result = CliRunner().invoke(main, ["serve", "--port", "70000"])
        assert result.exit_code == ExitCode.CONFIG_ERROR
        mock_run.assert_not_called()

    def test_exit_code_propagates(self) -> None:
        with patch(
            "playshelf.cli.serve.run_server",
            new=AsyncMock(return_value=ExitCode.ADDRESS_IN_USE),
        ):
            result = CliRunner().invoke(main, ["serve"])
        assert result.exit_code == ExitCode.ADDRESS_IN_USE


@pytest.mark.usefixtures("no_tools")
class TestRunServer:
    """Tests for run_server() failure paths."""

    def _config(self, media_root: Path, temp_dir: Path, port: int) -> PlayshelfConfig:
        return PlayshelfConfig(
            library=LibraryConfig(media_dir=media_root, generate_thumbnails=False),
            server=ServerConfig(port=port, shutdown_timeout=1.0),
            data_dir=temp_dir / "data",
        )

    async def test_database_error(self, media_root: Path, temp_dir: Path) -> None:
        blocker = temp_dir / "blocker"
        blocker.write_text("")
        config = self._config(media_root, temp_dir, 8421)
        config.database_path = blocker / "library.db"

        assert await run_server(config) == ExitCode.DATABASE_ERROR

    async def test_address_in_use(self, media_root: Path, temp_dir: Path) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", 0))
            sock.listen(1)
            port = sock.getsockname()[1]

            code = await run_server(
                self._config(media_root, temp_dir, port), scan_on_startup=False
            )

        assert code == ExitCode.ADDRESS_IN_USE
