"""Certificate signing request commands for the Puppet CA.

This module defines a ``certs`` Click group with subcommands to list, find,
sign, clean and delete certificate requests, and to print or mail a report
of the requests still waiting for a signature.
"""

from __future__ import annotations

import json
import smtplib
from typing import NoReturn

import click
from rich.markup import escape
from rich.table import Table

from remctl_admin.interfaces.cli.context import (
    CLIContext,
    certificate_service,
    console,
    err_console,
    get_cli_context,
)
from remctl_admin.services.certificates import (
    CertificateCommandError,
    CertificateDirectoryError,
    CertificateNotFoundError,
    CertificateService,
)


@click.group()
@click.pass_context
def certs(ctx: click.Context) -> None:
    """Manage certificate signing requests on the Puppet CA."""
    get_cli_context(ctx)


def _service(ctx: click.Context) -> CertificateService:
    return certificate_service(ctx.find_object(CLIContext))


def _fail(exc: Exception) -> NoReturn:
    err_console.print(f"[red]{escape(str(exc))}[/red]")
    raise click.exceptions.Exit(1)


@certs.command(name="list")
@click.option("--json-output", is_flag=True, help="Output the requests as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, json_output: bool) -> None:
    """List pending certificate signing requests."""
    try:
        requests = _service(ctx).list_requests()
    except CertificateDirectoryError as exc:
        _fail(exc)

    if json_output:
        payload = [
            {
                "name": request.name,
                "path": str(request.path),
                "requested_at": request.requested_at.isoformat(),
            }
            for request in requests
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    if not requests:
        console.print("[yellow]No pending certificate requests.[/yellow]")
        return

    table = Table(title="Pending certificate requests")
    table.add_column("Certname", style="bold")
    table.add_column("Requested (UTC)")
    table.add_column("Age (days)", justify="right")
    for request in requests:
        table.add_row(
            escape(request.name),
            request.requested_at.strftime("%Y-%m-%d %H:%M"),
            str(request.age_days()),
        )
    console.print(table)


@certs.command(name="find")
@click.argument("pattern")
@click.pass_context
def find_cmd(ctx: click.Context, pattern: str) -> None:
    """Find pending and signed certificates whose name matches PATTERN."""
    try:
        matches = _service(ctx).find(pattern)
    except (CertificateDirectoryError, ValueError) as exc:
        _fail(exc)

    if not matches:
        console.print(f"[yellow]No certificates match '{escape(pattern)}'.[/yellow]")
        ctx.exit(1)
    for match in matches:
        click.echo(f"{match.state.value:<8} {match.name}")


@certs.command(name="sign")
@click.argument("names", nargs=-1)
@click.option("--all", "all_pending", is_flag=True, help="Sign every pending request.")
@click.pass_context
def sign_cmd(ctx: click.Context, names: tuple[str, ...], all_pending: bool) -> None:
    """Sign the pending requests NAMES (or all of them with --all)."""
    if not names and not all_pending:
        raise click.UsageError("Give at least one certificate name or --all.")
    try:
        results = _service(ctx).sign(names, all_pending=all_pending)
    except (
        CertificateDirectoryError,
        CertificateNotFoundError,
        CertificateCommandError,
    ) as exc:
        _fail(exc)

    if not results:
        console.print("[yellow]No pending certificate requests.[/yellow]")
        return
    for result in results:
        console.print(f"[green]Signed [bold]{escape(result.name)}[/bold][/green]")


@certs.command(name="clean")
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def clean_cmd(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Revoke and remove the certificates NAMES on the CA."""
    try:
        results = _service(ctx).clean(names)
    except CertificateCommandError as exc:
        _fail(exc)
    for result in results:
        console.print(f"[green]Cleaned [bold]{escape(result.name)}[/bold][/green]")


@certs.command(name="delete")
@click.argument("names", nargs=-1, required=True)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def delete_cmd(ctx: click.Context, names: tuple[str, ...], yes: bool) -> None:
    """Delete the pending requests NAMES without signing them."""
    if not yes:
        click.confirm(
            f"Delete {len(names)} pending request(s): {', '.join(names)}?", abort=True
        )
    try:
        deleted = _service(ctx).delete(names)
    except (CertificateDirectoryError, CertificateNotFoundError) as exc:
        _fail(exc)
    for request in deleted:
        console.print(f"[green]Deleted request [bold]{escape(request.name)}[/bold][/green]")


@certs.command(name="report")
@click.option(
    "--email",
    "recipients",
    multiple=True,
    help="Mail the report to this address (repeatable).",
)
@click.option(
    "--only-pending",
    is_flag=True,
    help="Do not send mail when there are no pending requests.",
)
@click.pass_context
def report_cmd(
    ctx: click.Context, recipients: tuple[str, ...], only_pending: bool
) -> None:
    """Print a report of pending requests, optionally mailing it."""
    service = _service(ctx)
    try:
        requests = service.list_requests()
    except CertificateDirectoryError as exc:
        _fail(exc)

    hostname = service.hostname()
    report = service.build_report(requests, hostname)
    click.echo(report, nl=False)

    if not recipients:
        return
    if only_pending and not requests:
        console.print("[yellow]Nothing pending; no mail sent.[/yellow]")
        return
    try:
        service.send_report(report, recipients, hostname)
    except (smtplib.SMTPException, OSError) as exc:
        _fail(exc)
    console.print(f"[green]Report mailed to {escape(', '.join(recipients))}[/green]")
