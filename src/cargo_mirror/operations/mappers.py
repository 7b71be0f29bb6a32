"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and a command wrapper so
Typer commands don't need individual try/except blocks.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

EXIT_CODES = {
    "ChecksumNotFound": 1,
    "ConfigurationError": 2,
    "LockfileError": 2,
    "ValueError": 2,
    "CargoError": 4,
    "PersistError": 5,
}

FALLBACK_EXIT_CODE = 3


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns:
    - 1: Checksum not found in the local index (lookup command)
    - 2: Configuration, lockfile or settings error
    - 3: Unknown error
    - 4: Cargo invocation failed before resolving
    - 5: Cache write failed
    """
    return EXIT_CODES.get(type(exc).__name__, FALLBACK_EXIT_CODE)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exception to typer.Exit with the
    matching exit code after printing its message.

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        from .printers import print_error
        print_error(str(e) or type(e).__name__)
        raise typer.Exit(code=exit_code_for(e)) from e
