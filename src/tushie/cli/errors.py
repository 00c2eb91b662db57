"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across all CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Preprocessing, assembly or output error
    USAGE_ERROR = 1      # Missing positional arguments
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from tushie.errors import AssemblerError, TushieError

    prefix = f"{error_type} error: " if error_type else "Error: "

    if isinstance(error, AssemblerError):
        # Already formatted with location and "error:" prefix
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, TushieError):
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, OSError):
        # Output file cannot be created or written
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
