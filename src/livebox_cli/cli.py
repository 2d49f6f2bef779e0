"""Typer-based command line interface for the Livebox sysbus API."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from livebox_cli import __version__
from livebox_cli.commands.nat import nat_app
from livebox_cli.config import Settings
from livebox_cli.connection import (
    BaseUrlOption,
    InsecureOption,
    PasswordOption,
    TimeoutOption,
    UsernameOption,
)
from livebox_cli.errors import InvalidExpressionError, LiveboxError
from livebox_cli.logs import configure_logging
from livebox_cli.query import QueryFilter
from livebox_cli.runtime import CliState, connect, fail, get_state

app = typer.Typer(
    no_args_is_help=True,
    help="Query and configure a Livebox through its sysbus API.",
)
app.add_typer(nat_app, name="nat")
console = Console()


def _parse_parameters(values: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into call parameters; values are JSON when they parse."""

    parameters: dict[str, Any] = {}
    for item in values:
        key, separator, raw_value = item.partition("=")
        if not separator or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {item!r}", param_hint="--param")
        try:
            parameters[key.strip()] = json.loads(raw_value)
        except ValueError:
            parameters[key.strip()] = raw_value
    return parameters


@app.callback()
def common_options(
    ctx: typer.Context,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    insecure: InsecureOption = False,
    timeout: TimeoutOption = None,
    query: Annotated[
        str | None,
        typer.Option(
            "--query",
            "-q",
            help="JSONPath expression filtering the output (ex: $.data.IPAddress).",
        ),
    ] = None,
    raw: Annotated[
        bool,
        typer.Option("--raw", "-r", help="Output raw strings, not JSON text."),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase log verbosity (-vv for wire traces)."
        ),
    ] = 0,
    env_file: Annotated[
        Path | None,
        typer.Option(
            "--env-file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Optional .env file with LIVEBOX_CLI_* variables.",
        ),
    ] = None,
) -> None:
    """Load shared configuration for all commands."""

    configure_logging(verbose)
    try:
        query_filter = QueryFilter(query, raw)
    except InvalidExpressionError as exc:
        fail(exc)

    ctx.obj = CliState(
        settings=Settings.from_env_file(env_file),
        base_url=base_url,
        username=username,
        password=password,
        insecure=insecure,
        timeout=timeout,
        query=query_filter,
    )


@app.command("version")
def show_version() -> None:
    """Show the installed livebox-cli version."""

    console.print(f"livebox-cli {__version__}")


@app.command("exec")
def exec_method(
    ctx: typer.Context,
    service: Annotated[str, typer.Option("--service", "-s", help="Service name (ex: NMC).")],
    method: Annotated[
        str, typer.Option("--method", "-m", help="Method name (ex: getWANStatus).")
    ],
    param: Annotated[
        list[str] | None,
        typer.Option(
            "--param",
            "-P",
            help=(
                "Method parameter as key=value, repeatable. Values are parsed as JSON "
                "when possible (123, true); write key='\"123\"' to send a string."
            ),
        ),
    ] = None,
) -> None:
    """Invoke a sysbus method and print its response."""

    state: CliState = get_state(ctx)
    parameters = _parse_parameters(param or [])

    try:
        with connect(state) as (invoker, session):
            envelope = invoker.call(session, service, method, parameters)
        output = state.query.apply(envelope.as_document())
    except LiveboxError as exc:
        fail(exc)

    typer.echo(output)
