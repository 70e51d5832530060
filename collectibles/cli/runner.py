"""Shared helpers for running async work from CLI commands."""

import asyncio
import selectors
import sys
from collections.abc import Coroutine
from typing import Any

import typer
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

console = Console()
error_console = Console(stderr=True)


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run an async coroutine synchronously.

    On Windows, psycopg3 requires SelectorEventLoop instead of ProactorEventLoop.
    """
    if sys.platform == "win32":
        loop = asyncio.SelectorEventLoop(selectors.SelectSelector())
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()
    return asyncio.run(coro)


def handle_db_error(e: SQLAlchemyError) -> None:
    """Report a database failure and exit with status 1."""
    error_console.print("[red]Error: Unable to connect to database.[/red]")
    error_console.print(f"[dim]Details: {e!s}[/dim]")
    raise typer.Exit(1) from None
