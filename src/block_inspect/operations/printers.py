"""
Human-readable diagnostics.

Block renderings go to stdout untouched; everything meant for a person
(errors, the summary in verbose mode) goes to stderr through Rich.
"""
from __future__ import annotations

from rich.console import Console
from rich.markup import escape

_err_console = Console(stderr=True, soft_wrap=True)


def print_error(exc: BaseException) -> None:
    """
    Print an error message to stderr.

    Args:
        exc: Exception raised by a command
    """
    _err_console.print(f"[bold red]Error:[/] {escape(str(exc))}")


def print_ls_summary(count: int, bucket: str) -> None:
    """
    Print the number of blocks listed.

    Args:
        count: Blocks printed
        bucket: Bucket name
    """
    noun = "block" if count == 1 else "blocks"
    _err_console.print(f"[dim]{count} {noun} in {escape(bucket)}[/]")
