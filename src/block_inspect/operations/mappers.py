"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and CLI command wrappers
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import logging
from typing import Callable, TypeVar

import typer

T = TypeVar('T')

logger = logging.getLogger(__name__)

# Exit codes by exception class name; subclasses inherit their base's code
EXIT_CODES = {
    "SetupFailed": 2,
    "ValueError": 2,
    "EnumerationFailed": 3,
    "FetchFailed": 4,
    "DecodeFailed": 5,
    "RenderFailed": 6,
    "DeadlineExceeded": 7,
}

FALLBACK_EXIT_CODE = 1


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns:
    - 2: Setup error (SetupFailed) or invalid value (ValueError)
    - 3: Listing failed (EnumerationFailed)
    - 4: meta.json could not be read (FetchFailed)
    - 5: meta.json is invalid (DecodeFailed)
    - 6: Output could not be rendered (RenderFailed)
    - 7: Time budget exceeded (DeadlineExceeded)
    - 1: Anything else

    Args:
        exc: Exception to map

    Returns:
        Exit code
    """
    for cls in type(exc).__mro__:
        if cls.__name__ in EXIT_CODES:
            return EXIT_CODES[cls.__name__]
    return FALLBACK_EXIT_CODE


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exceptions to appropriate
    exit codes using typer.Exit, after printing the error to stderr.
    This centralizes error handling so CLI commands don't need individual
    try/except blocks.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        from .printers import print_error
        logger.debug("Command failed", exc_info=True)
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e
