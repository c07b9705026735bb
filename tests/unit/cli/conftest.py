"""Fixtures for CLI tests."""

from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI invocations from reconfiguring the root logger."""
    with (
        patch("playshelf.cli._configure_logging"),
        patch("playshelf.cli.serve._configure_server_logging"),
    ):
        yield


@pytest.fixture
def no_tools():
    """Pretend ffmpeg and ffprobe are not installed."""
    with (
        patch("playshelf.scanner.assets.find_tool", return_value=None),
        patch("playshelf.scanner.orchestrator.find_tool", return_value=None),
    ):
        yield
