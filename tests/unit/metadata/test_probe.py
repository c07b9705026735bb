"""Tests for ffprobe duration probing."""

import subprocess
from pathlib import Path
from unittest.mock import patch

from playshelf.metadata.probe import probe_duration

FFPROBE = Path("/usr/bin/ffprobe")


class TestProbeDuration:
    def test_no_ffprobe_means_unknown(self, temp_dir: Path) -> None:
        assert probe_duration(None, temp_dir / "a.mp4") is None

    def test_parses_format_duration(self, temp_dir: Path) -> None:
        with patch(
            "playshelf.metadata.probe.run_command",
            return_value=('{"format": {"duration": "12.500"}}', "", 0),
        ) as mock_run:
            assert probe_duration(FFPROBE, temp_dir / "a.mp4") == 12.5

        args = mock_run.call_args[0][0]
        assert args[0] == FFPROBE
        assert args[-1] == temp_dir / "a.mp4"

    def test_nonzero_exit(self, temp_dir: Path) -> None:
        with patch(
            "playshelf.metadata.probe.run_command",
            return_value=("", "Invalid data found", 1),
        ):
            assert probe_duration(FFPROBE, temp_dir / "a.mp4") is None

    def test_timeout(self, temp_dir: Path) -> None:
        with patch(
            "playshelf.metadata.probe.run_command",
            side_effect=subprocess.TimeoutExpired("ffprobe", 60),
        ):
            assert probe_duration(FFPROBE, temp_dir / "a.mp4") is None

    def test_missing_or_bad_duration(self, temp_dir: Path) -> None:
        for stdout in ("not json", '{"format": {}}', '{"format": {"duration": "0"}}'):
            with patch(
                "playshelf.metadata.probe.run_command", return_value=(stdout, "", 0)
            ):
                assert probe_duration(FFPROBE, temp_dir / "a.mp4") is None
