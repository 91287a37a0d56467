"""Puppet agent wrapper commands.

Provides an ``agent`` Click group with subcommands to run the agent once,
run it in noop mode, lock and unlock it, and show its status and
certificate fingerprint.
"""

from __future__ import annotations

import json

import click
from rich.markup import escape
from rich.table import Table

from remctl_admin.interfaces.cli.context import (
    CLIContext,
    console,
    err_console,
    get_cli_context,
    puppet_agent_service,
)
from remctl_admin.services.dto import AgentStatus
from remctl_admin.services.puppet_agent import (
    AgentDisabledError,
    PuppetCommandError,
    run_succeeded,
)


@click.group()
@click.pass_context
def agent(ctx: click.Context) -> None:
    """Run, lock and inspect the local puppet agent."""
    get_cli_context(ctx)


def _run(ctx: click.Context, extra_args: tuple[str, ...], noop: bool) -> None:
    cli_context: CLIContext = ctx.find_object(CLIContext)
    service = puppet_agent_service(cli_context)
    try:
        result = service.run(extra_args, noop=noop)
    except AgentDisabledError as exc:
        err_console.print(f"[yellow]{escape(str(exc))}[/yellow]")
        ctx.exit(1)
    except PuppetCommandError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        ctx.exit(1)

    if result.stdout:
        click.echo(result.stdout, nl=False)
    if result.stderr:
        click.echo(result.stderr, nl=False, err=True)
    if not run_succeeded(result):
        ctx.exit(result.returncode or 1)


@agent.command(name="run", context_settings={"ignore_unknown_options": True})
@click.option("--noop", is_flag=True, help="Only report what would change.")
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run_cmd(ctx: click.Context, noop: bool, extra_args: tuple[str, ...]) -> None:
    """Run the puppet agent once in the foreground.

    Any EXTRA_ARGS are passed through to ``puppet agent`` unchanged.
    """
    _run(ctx, extra_args, noop)


@agent.command(name="noop", context_settings={"ignore_unknown_options": True})
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def noop_cmd(ctx: click.Context, extra_args: tuple[str, ...]) -> None:
    """Run the puppet agent once with --noop."""
    _run(ctx, extra_args, True)


@agent.command(name="lock")
@click.argument("message", nargs=-1)
@click.pass_context
def lock_cmd(ctx: click.Context, message: tuple[str, ...]) -> None:
    """Disable the puppet agent, recording MESSAGE as the reason."""
    service = puppet_agent_service(ctx.find_object(CLIContext))
    try:
        service.lock(" ".join(message) or None)
    except PuppetCommandError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        ctx.exit(1)
    console.print("[green]Puppet agent locked.[/green]")


@agent.command(name="unlock")
@click.pass_context
def unlock_cmd(ctx: click.Context) -> None:
    """Re-enable a locked puppet agent."""
    service = puppet_agent_service(ctx.find_object(CLIContext))
    try:
        service.unlock()
    except PuppetCommandError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        ctx.exit(1)
    console.print("[green]Puppet agent unlocked.[/green]")


def _status_table(status: AgentStatus) -> Table:
    table = Table(title="Puppet agent")
    table.add_column("State", style="bold")
    table.add_column("Value")
    if status.disabled:
        locked = "yes"
        if status.disabled_message:
            locked = f"yes ({escape(status.disabled_message)})"
    else:
        locked = "no"
    table.add_row("Locked", locked)
    if status.running:
        running = f"yes (pid {status.running_pid})" if status.running_pid else "yes"
    else:
        running = "no"
    table.add_row("Running", running)
    last_run = (
        status.last_run_at.strftime("%Y-%m-%d %H:%M:%S UTC")
        if status.last_run_at
        else "never"
    )
    table.add_row("Last run", last_run)
    return table


@agent.command(name="status")
@click.option("--json-output", is_flag=True, help="Output the status as JSON.")
@click.pass_context
def status_cmd(ctx: click.Context, json_output: bool) -> None:
    """Show whether the agent is locked or running, and when it last ran."""
    status = puppet_agent_service(ctx.find_object(CLIContext)).status()
    if json_output:
        click.echo(json.dumps(status.model_dump(mode="json"), indent=2))
        return
    console.print(_status_table(status))


@agent.command(name="fingerprint")
@click.pass_context
def fingerprint_cmd(ctx: click.Context) -> None:
    """Print the agent certificate fingerprint."""
    service = puppet_agent_service(ctx.find_object(CLIContext))
    try:
        click.echo(service.fingerprint())
    except PuppetCommandError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        ctx.exit(1)
