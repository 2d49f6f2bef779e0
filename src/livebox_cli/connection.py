"""Shared connection option resolution for CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import typer

from livebox_cli.config import Settings

BaseUrlOption = Annotated[
    str | None,
    typer.Option(
        "--base-url",
        envvar="LIVEBOX_API_BASEURL",
        help="Livebox base URL (default: http://livebox.home).",
    ),
]
UsernameOption = Annotated[
    str | None, typer.Option("--username", "-u", help="Livebox administration username.")
]
PasswordOption = Annotated[
    str | None, typer.Option("--password", "-p", help="Livebox administration password.")
]
InsecureOption = Annotated[
    bool,
    typer.Option("--insecure", help="Disable TLS certificate verification."),
]
TimeoutOption = Annotated[
    float | None,
    typer.Option("--timeout", min=0.1, help="HTTP timeout in seconds."),
]


@dataclass(frozen=True, slots=True)
class Credentials:
    """Resolved connection parameters for one Livebox."""

    base_url: str
    username: str
    password: str
    allow_insecure_tls: bool = False
    timeout: float = 10.0

    @property
    def ws_url(self) -> str:
        """Endpoint receiving every sysbus call."""

        return f"{self.base_url.rstrip('/')}/ws"


def _resolve(value: str | None, default: str | None, option_name: str) -> str:
    if value:
        return value
    if default:
        return default
    raise typer.BadParameter(
        f"Provide --{option_name} or set LIVEBOX_CLI_{option_name.upper().replace('-', '_')}."
    )


def resolve_credentials(
    settings: Settings,
    base_url: str | None,
    username: str | None,
    password: str | None,
    insecure: bool,
    timeout: float | None = None,
) -> Credentials:
    """Resolve command options and settings into session credentials."""

    return Credentials(
        base_url=_resolve(base_url, settings.base_url, "base-url").rstrip("/"),
        username=_resolve(username, settings.username, "username"),
        password=_resolve(password, settings.password, "password"),
        allow_insecure_tls=insecure or not settings.verify_ssl,
        timeout=timeout if timeout is not None else settings.timeout,
    )
