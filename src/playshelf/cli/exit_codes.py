"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, input)
    40-49: Operation errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for playshelf CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2  # Ctrl+C / SIGINT, or a scan stopped before completion

    # Validation errors (10-19)
    CONFIG_ERROR = 11
    INVALID_ARGUMENTS = 12

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    DATABASE_ERROR = 42
    ADDRESS_IN_USE = 43
