"""Styled terminal output for CLI commands.

Status messages go to stderr; tables and results go to stdout.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.markup import escape

_out = Console(highlight=False)
_err = Console(stderr=True, highlight=False)


def error(message: str) -> None:
    _err.print(f"[bold red]error:[/] {escape(message)}")


def warning(message: str) -> None:
    _err.print(f"[yellow]warning:[/] {escape(message)}")


def success(message: str) -> None:
    _err.print(f"[green]✓[/] {escape(message)}")


def info(message: str) -> None:
    _err.print(escape(message))


def dim(message: str) -> None:
    _out.print(f"[dim]{escape(message)}[/]")


def header(title: str) -> None:
    _out.print(f"\n[bold cyan]{escape(title)}[/]")
    _out.print(f"[cyan]{'─' * len(title)}[/]")


def subheader(title: str) -> None:
    _out.print(f"\n[bold]{escape(title)}[/]")


def key_value(key: str, value: Any, indent: int = 2) -> None:
    _out.print(f"{' ' * indent}[dim]{escape(key)}:[/] {escape(str(value))}")


def line(text: str = "") -> None:
    _out.print(escape(text))


@contextmanager
def status(message: str) -> Iterator[None]:
    """Spinner on stderr while a long step runs."""
    with _err.status(escape(message)):
        yield
