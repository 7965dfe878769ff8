# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Shared consoles, logging setup and the command error boundary.

Data goes to stdout; status lines, progress and errors go to stderr so
piped output stays machine-readable.
"""

import asyncio
import functools
import logging
import sys
from typing import Any, Awaitable, Callable, NoReturn, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from helicone_library.core.errors import HeliconeError

T = TypeVar("T")

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def setup_logging(verbose: bool = False) -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=False,
        rich_tracebacks=verbose,
        tracebacks_suppress=["click", "asyncio"],
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def fail(message: str) -> NoReturn:
    """Print one red error line and exit with status 1."""
    err_console.print(f"[red]Error: {escape(message)}[/red]", markup=True, soft_wrap=True)
    sys.exit(1)


def info(message: str) -> None:
    err_console.print(f"[dim]{escape(message)}[/dim]", soft_wrap=True)


def notice(message: str) -> None:
    """Yellow informational line, e.g. for empty results."""
    err_console.print(f"[yellow]{escape(message)}[/yellow]", soft_wrap=True)


def success(message: str) -> None:
    err_console.print(f"[green]✓[/green] {escape(message)}", soft_wrap=True)


def emit(text: str) -> None:
    """Write raw data to stdout with no markup interpretation."""
    click.echo(text)


def run_async(awaitable: Awaitable[T]) -> T:
    return asyncio.run(awaitable)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn library errors into a single error line and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except HeliconeError as e:
            fail(str(e))

    return wrapper
