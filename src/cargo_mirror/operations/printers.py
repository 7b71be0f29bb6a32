"""
Human-readable output formatting.

Centralizes all CLI output so commands and the facade stay free of
formatting concerns.
"""
from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.markup import escape

from ..models import ResolveOutcome, ResolveStatus, RunSummary

_console = Console(highlight=False)


def print_outcome(outcome: ResolveOutcome, verbose: bool = False) -> None:
    """
    Print the status line for one package.

    Args:
        outcome: Result of resolving the package
        verbose: Also print packages that were already present
    """
    label = escape(outcome.ref.label)
    status = outcome.status

    if status is ResolveStatus.SKIPPED:
        if verbose:
            _console.print(f"[dim]skip {label} (already present)[/]", soft_wrap=True)
    elif status is ResolveStatus.PERSISTED:
        _console.print(
            f"[green]download {label} success[/], {_format_bytes(outcome.size)}",
            soft_wrap=True,
        )
    elif status is ResolveStatus.REJECTED:
        _console.print(
            f"[red]download {label} rejected[/]: {escape(outcome.detail)}",
            soft_wrap=True,
        )
    else:
        _console.print(
            f"[red]download {label} failed[/]: {escape(outcome.detail)}",
            soft_wrap=True,
        )


def print_summary(summary: RunSummary) -> None:
    """
    Print counts for the whole run, then every failed package so it can be
    retried by hand.
    """
    skipped = summary.count(ResolveStatus.SKIPPED)
    persisted = summary.count(ResolveStatus.PERSISTED)
    failures = summary.failures

    _console.print(
        f"[bold]Mirror:[/] {len(summary)} crates, {skipped} present, "
        f"{persisted} downloaded ({_format_bytes(summary.total_bytes)}), {len(failures)} failed",
        soft_wrap=True,
    )
    for outcome in failures:
        _console.print(
            f"  {escape(outcome.ref.name)} {escape(outcome.ref.version)}: {outcome.status.value}",
            soft_wrap=True,
        )


def print_passthrough(command: Sequence[str]) -> None:
    """Print the exact command handed to cargo."""
    _console.print(f"[bold]Running:[/] {escape(' '.join(command))}", soft_wrap=True)


def print_checksum(name: str, version: str, checksum: str) -> None:
    _console.print(f"{escape(name)} {escape(version)} {checksum}", soft_wrap=True)


def print_error(message: str) -> None:
    _console.print(f"[red]error:[/] {escape(message)}", soft_wrap=True)


def _format_bytes(size_bytes: int) -> str:
    """
    Format byte count as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "42 KB")
    """
    if size_bytes == 0:
        return "0 B"
    elif size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
