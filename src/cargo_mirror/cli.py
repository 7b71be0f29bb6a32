"""
cargo-mirror CLI

Installed as the ``cargo-mirror`` executable, so Cargo exposes it as
``cargo mirror``:
- mirror: Fetch missing crates from the mirror, then run ``cargo <ARGS>``
- prefetch: Fetch missing crates only
- lookup: Print the local index checksum of one crate
"""
from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .cli_context import CLIContext
from .operations import run_and_exit
from .operations.printers import (
    print_checksum, print_outcome, print_passthrough, print_summary
)

app = typer.Typer(name="cargo-mirror", help="Fetch locked crates from a mirror, verified against the local index")

PASSTHROUGH_CONTEXT = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
    "help_option_names": [],
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _context(ctx: typer.Context) -> CLIContext:
    """Load settings on first use so configuration errors get an exit code."""
    if ctx.obj is None:
        ctx.obj = CLIContext.from_env(verbose=ctx.meta.get("verbose", False))
    return ctx.obj


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", envvar="CARGO_MIRROR_VERBOSE", help="Show debug logging and skipped crates"),
) -> None:
    """Fetch locked crates from a mirror, verified against the local index."""
    ctx.meta["verbose"] = verbose
    _configure_logging(verbose)


@app.command(context_settings=PASSTHROUGH_CONTEXT)
def mirror(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="Arguments passed verbatim to cargo"),
) -> None:
    """Fetch missing crates from the mirror, then run cargo with ARGS."""

    def _mirror() -> int:
        context = _context(ctx)
        ops = context.operations()
        cargo_args = list(args or [])
        try:
            summary = ops.prefetch(on_outcome=lambda o: print_outcome(o, verbose=context.verbose))
        finally:
            ops.close()
        print_summary(summary)
        print_passthrough(ops.passthrough_command(cargo_args))
        return ops.passthrough(cargo_args)

    raise typer.Exit(code=run_and_exit(_mirror))


@app.command()
def prefetch(
    ctx: typer.Context,
    no_update: bool = typer.Option(False, "--no-update", help="Skip refreshing the local index"),
) -> None:
    """Fetch missing crates from the mirror without running cargo."""

    def _prefetch() -> None:
        context = _context(ctx)
        ops = context.operations(update_index=not no_update)
        try:
            summary = ops.prefetch(on_outcome=lambda o: print_outcome(o, verbose=context.verbose))
        finally:
            ops.close()
        print_summary(summary)

    run_and_exit(_prefetch)


@app.command()
def lookup(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Crate name"),
    version: str = typer.Argument(..., help="Exact crate version"),
) -> None:
    """Print the checksum the local index records for NAME VERSION."""

    def _lookup() -> None:
        ops = _context(ctx).operations(update_index=False)
        print_checksum(name, version, ops.lookup(name, version))

    run_and_exit(_lookup)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
