"""List the remctl commands configured on this host and show their help.

This module defines the ``commands`` Click command. It reads every file in
the remctl configuration directory, keeps the services that answer ``help``
(subcommand ``ALL`` or ``help``) and either lists their names or runs each
one's help and prints the output. The same command is installed on its own as
``remctl-help``.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape

from remctl_admin.infrastructure.remctl import ConfigDirectoryError
from remctl_admin.interfaces.cli.context import (
    err_console,
    get_cli_context,
    help_dispatch_service,
)
from remctl_admin.services.dto import HelpBlock

SEPARATOR = "=" * 72
SUMMARY_HEADER = "Available remctl commands:"

MANUAL = """\
NAME
    remctl-help - list remctl commands and show their help

SYNOPSIS
    remctl-help [--verbose] [--config-dir DIR]
    remctl-help --manual

DESCRIPTION
    Reads every file in the remctl configuration directory
    (/etc/remctl/conf.d unless overridden) and collects the commands whose
    subcommand is ALL or help and whose program exists on disk. Lines
    starting with # are comments and a trailing backslash continues a
    line.

    Without options the service names are printed in sorted order. With
    --verbose each program is run with the single argument "help" and its
    output is printed under a header naming the service. A program that
    cannot be run or exits non-zero gets a WARNING line in its block; the
    remaining services are still shown.

OPTIONS
    -v, --verbose      Run each command's help and print its output.
    --config-dir DIR   Read remctl configuration from DIR.
    --manual           Print this manual and exit.

EXIT STATUS
    0 on success, 2 when the configuration directory cannot be read.
"""


def render_help_block(block: HelpBlock) -> None:
    click.echo(SEPARATOR)
    click.echo(f"Service: {block.service}")
    click.echo("")
    if block.text:
        click.echo(block.text, nl=not block.text.endswith("\n"), color=True)
    if block.warning:
        click.echo(f"WARNING: {block.warning}")


@click.command(
    name="commands", context_settings={"help_option_names": ["-h", "--help"]}
)
@click.option(
    "-v", "--verbose", is_flag=True, help="Run each command's help and print its output."
)
@click.option("--manual", is_flag=True, help="Print the manual and exit.")
@click.option(
    "--config-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="remctl configuration directory (default from settings).",
)
@click.pass_context
def commands(
    ctx: click.Context, verbose: bool, manual: bool, config_dir: Path | None
) -> None:
    """List remctl commands, or show each command's help with --verbose."""
    if manual:
        click.echo(MANUAL, nl=False)
        return

    service = help_dispatch_service(get_cli_context(ctx))
    try:
        table = service.discover(config_dir)
    except ConfigDirectoryError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        ctx.exit(2)

    if not verbose:
        click.echo(SUMMARY_HEADER)
        for name in service.summary(table):
            click.echo(f"  {name}")
        return

    for block in service.collect(table):
        render_help_block(block)
