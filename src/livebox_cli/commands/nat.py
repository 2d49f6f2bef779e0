"""NAT command group implementation."""

from __future__ import annotations

from typing import Annotated, Literal, cast

import typer
from rich.console import Console
from rich.table import Table

from livebox_cli.errors import LiveboxError
from livebox_cli.models.nat import NatProtocol, NatRule, validate_rule, validate_rule_id
from livebox_cli.models.sysbus import ResponseEnvelope
from livebox_cli.runtime import CliState, connect, fail, get_state
from livebox_cli.services.nat_service import NatAction, NatRuleCodec

nat_app = typer.Typer(no_args_is_help=True, help="Manage firewall NAT (port forwarding) rules.")
console = Console()

OutputFormat = Literal["table", "json"]

RuleIdOption = Annotated[str, typer.Option("--id", help="Rule identifier.")]


def _render_rules(rules: list[NatRule], output: OutputFormat, state: CliState) -> None:
    if output == "json" or state.query.path is not None:
        typer.echo(state.query.apply([rule.model_dump() for rule in rules]))
        return

    table = Table(title="NAT Rules")
    table.add_column("Id")
    table.add_column("Description")
    table.add_column("Protocol")
    table.add_column("Source")
    table.add_column("Source port")
    table.add_column("Destination")
    table.add_column("Destination port")
    table.add_column("Enabled")

    for rule in rules:
        table.add_row(
            rule.id,
            rule.description,
            rule.protocol,
            rule.source_host or "*",
            rule.source_port,
            rule.destination_host,
            rule.destination_port,
            "yes" if rule.enabled else "no",
        )

    console.print(table)


def _run_mutation(
    ctx: typer.Context,
    action: NatAction,
    *,
    rule: NatRule | None = None,
    rule_id: str | None = None,
) -> None:
    state = get_state(ctx)
    try:
        with connect(state) as (invoker, session):
            result = NatRuleCodec(invoker).run(session, action, rule=rule, rule_id=rule_id)
        output = state.query.apply(cast(ResponseEnvelope, result).as_document())
    except LiveboxError as exc:
        fail(exc)

    typer.echo(output)


@nat_app.command("list")
def nat_list(
    ctx: typer.Context,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", help="Response format: table or json."),
    ] = "table",
) -> None:
    """List the NAT rules currently configured on the device."""

    state = get_state(ctx)
    try:
        with connect(state) as (invoker, session):
            rules = NatRuleCodec(invoker).list_rules(session)
        _render_rules(rules, output, state)
    except LiveboxError as exc:
        fail(exc)


@nat_app.command("add")
def nat_add(
    ctx: typer.Context,
    rule_id: RuleIdOption,
    destination: Annotated[
        str, typer.Option("--destination", help="LAN host receiving the traffic.")
    ],
    protocol: Annotated[
        NatProtocol,
        typer.Option("--protocol", help="Protocol: tcp, udp or all."),
    ] = "tcp",
    description: Annotated[str, typer.Option("--description", help="Rule description.")] = "",
    source: Annotated[
        str, typer.Option("--source", help="Allowed source prefix (empty for any).")
    ] = "",
    sport: Annotated[
        str, typer.Option("--sport", help="External port or range (ex: 8080 or 8000-8010).")
    ] = "",
    dport: Annotated[
        str | None,
        typer.Option("--dport", help="Internal port or range (defaults to --sport)."),
    ] = None,
    disabled: Annotated[
        bool, typer.Option("--disabled", help="Create the rule disabled.")
    ] = False,
) -> None:
    """Add a NAT rule."""

    rule = NatRule(
        id=rule_id,
        description=description,
        protocol=protocol,
        source_host=source,
        source_port=sport,
        destination_host=destination,
        destination_port=dport if dport is not None else sport,
        enabled=not disabled,
    )
    try:
        rule = validate_rule(rule)
    except ValueError as exc:
        fail(exc)

    _run_mutation(ctx, NatAction.ADD, rule=rule)


@nat_app.command("enable")
def nat_enable(ctx: typer.Context, rule_id: RuleIdOption) -> None:
    """Enable a NAT rule."""

    _run_id_action(ctx, NatAction.ENABLE, rule_id)


@nat_app.command("disable")
def nat_disable(ctx: typer.Context, rule_id: RuleIdOption) -> None:
    """Disable a NAT rule."""

    _run_id_action(ctx, NatAction.DISABLE, rule_id)


@nat_app.command("remove")
def nat_remove(ctx: typer.Context, rule_id: RuleIdOption) -> None:
    """Remove a NAT rule."""

    _run_id_action(ctx, NatAction.REMOVE, rule_id)


@nat_app.command("commit")
def nat_commit(ctx: typer.Context) -> None:
    """Persist the device's current firewall configuration."""

    _run_mutation(ctx, NatAction.COMMIT)


def _run_id_action(ctx: typer.Context, action: NatAction, rule_id: str) -> None:
    try:
        validate_rule_id(rule_id)
    except ValueError as exc:
        fail(exc)

    _run_mutation(ctx, action, rule_id=rule_id)
