"""
CLI Error Handling
==================

Maps exceptions to messages and exit codes for the command-line tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from lc3asm.errors import Lc3Error


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly error, including unreadable source
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always
    """
    if isinstance(error, Lc3Error):
        # Assembler errors carry their own "file:line: error:" prefix
        prefix = f"{error_type} failed\n" if error_type else ""
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
