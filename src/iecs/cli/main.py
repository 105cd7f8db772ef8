#!/usr/bin/env python3
"""iecs CLI entrypoint.

A thin shell: parse arguments, dispatch to the command runner, and turn
surfaced errors into a message and an exit status.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Final, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from ..exceptions import IecsError, PreflightError, SelectionCancelled
from . import exec_runner, logs_runner
from .parser import create_parser
from .preflight import print_hint

__all__: Final = ["main"]

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def report_error(console: Console, exc: IecsError, *, verbose: bool = False) -> int:
    """Print ``exc`` for the operator and return the exit status."""
    if isinstance(exc, SelectionCancelled):
        console.print("\n[yellow]Selection cancelled[/yellow]")
        return EXIT_USAGE
    if isinstance(exc, PreflightError):
        print_hint(console, f"Error: {exc}", exc.hints)
        return EXIT_FAILURE
    console.print(f"[red]Error: {escape(str(exc))}[/red]")
    if verbose:
        console.print_exception()
    return EXIT_FAILURE


def _handle_interrupt(console: Console) -> int:
    console.print("\n[yellow]Interrupted[/yellow]")
    return EXIT_USAGE


async def _dispatch(console: Console, args: argparse.Namespace) -> int:
    try:
        if args.command_name == "exec":
            return await exec_runner.run_exec(console, args)
        if args.command_name == "logs":
            return await logs_runner.run_logs(console, args)
    except (KeyboardInterrupt, asyncio.CancelledError):
        return _handle_interrupt(console)
    except IecsError as exc:
        logger.info("command failed: %s", exc, extra={"error": type(exc).__name__})
        return report_error(console, exc, verbose=bool(getattr(args, "verbose", False)))
    console.print(f"[red]Error: unknown command {args.command_name}[/red]")
    return EXIT_USAGE


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint."""
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.command_name is None:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_USAGE)
    # Operator chatter goes to stderr so stdout carries only log lines.
    console = Console(stderr=True)

    rc = asyncio.run(_dispatch(console, args))
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
