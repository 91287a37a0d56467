"""Entry point for running the remctl-admin CLI.

This module defines a top-level Click group that aggregates all subcommands
defined in the ``remctl_admin.interfaces.cli`` package. Executing
``python -m remctl_admin.interfaces.cli`` will invoke this group and present
the available commands.
"""

from __future__ import annotations

import logging

import click

from remctl_admin import __version__
from remctl_admin.infrastructure.observability import configure_logging

from .agent import agent
from .certs import certs
from .commands import commands
from .context import CLIContext, build_cli_context_or_exit


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="REMCTL_ADMIN_CONFIG",
    help="JSON settings file.",
)
@click.option("--debug", is_flag=True, help="Log debug messages to stderr.")
@click.version_option(__version__, prog_name="remctl-admin")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, debug: bool) -> None:
    """Administrative helpers for remctl and Puppet hosts."""
    configure_logging(logging.DEBUG if debug else logging.WARNING)
    if not isinstance(ctx.obj, CLIContext):
        ctx.obj = build_cli_context_or_exit(config_path)


cli.add_command(commands)
cli.add_command(agent)
cli.add_command(certs)


if __name__ == "__main__":
    cli()
