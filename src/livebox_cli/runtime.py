"""Per-invocation state shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import NoReturn, cast

import typer
from rich.console import Console

from livebox_cli.config import Settings
from livebox_cli.connection import resolve_credentials
from livebox_cli.invoker import Invoker
from livebox_cli.models.sysbus import Session
from livebox_cli.query import QueryFilter
from livebox_cli.sdk import create_http_client
from livebox_cli.session import SysbusSession

err_console = Console(stderr=True)


@dataclass(slots=True)
class CliState:
    """Global options collected by the app callback."""

    settings: Settings
    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    insecure: bool = False
    timeout: float | None = None
    query: QueryFilter = field(default_factory=QueryFilter)


def get_state(ctx: typer.Context) -> CliState:
    return cast(CliState, ctx.obj)


@contextmanager
def connect(state: CliState) -> Iterator[tuple[Invoker, Session]]:
    """Log in, yield an invoker with its session, and log out afterwards."""

    credentials = resolve_credentials(
        state.settings,
        state.base_url,
        state.username,
        state.password,
        state.insecure,
        state.timeout,
    )
    with SysbusSession(credentials, create_http_client(credentials)) as sysbus:
        session = sysbus.authenticate()
        try:
            yield Invoker(sysbus), session
        finally:
            sysbus.logout(session)


def fail(exc: Exception) -> NoReturn:
    """Report ``exc`` on stderr and exit non-zero."""

    err_console.print(
        f"Error: {exc}", style="bold red", markup=False, highlight=False, soft_wrap=True
    )
    raise typer.Exit(code=1) from exc
