"""Shared utilities with no dependency on the rest of playshelf."""

from .subprocess_utils import find_tool, run_command

__all__ = ["find_tool", "run_command"]
