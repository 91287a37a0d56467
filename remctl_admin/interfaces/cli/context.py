"""Shared helpers for composing CLI command contexts.

This module centralises common CLI wiring: resolving settings once per
invocation and building services bound to a single command runner.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from remctl_admin.app.config import AdminSettings, ConfigError, load_settings
from remctl_admin.infrastructure.process import CommandRunner, SubprocessRunner
from remctl_admin.services import (
    CertificateService,
    HelpDispatchService,
    PuppetAgentService,
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


@dataclass(frozen=True)
class CLIContext:
    """Container for CLI dependencies: resolved settings and a runner."""

    settings: AdminSettings
    runner: CommandRunner


def build_cli_context(config_path: str | Path | None = None) -> CLIContext:
    """Build the CLI context from the configuration file and real subprocesses.

    Raises:
        ConfigError: If the configuration file is missing or invalid.
    """
    settings = load_settings(config_path)
    return CLIContext(settings=settings, runner=SubprocessRunner(path=settings.bin_path))


def build_cli_context_or_exit(config_path: str | Path | None = None) -> CLIContext:
    """Build the CLI context, exiting with status 2 on a configuration error."""
    try:
        return build_cli_context(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise click.exceptions.Exit(2) from exc


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Return the context object, building a default one for standalone use."""
    cli_context = ctx.find_object(CLIContext)
    if cli_context is None:
        cli_context = build_cli_context_or_exit()
        ctx.obj = cli_context
    return cli_context


def help_dispatch_service(cli_context: CLIContext) -> HelpDispatchService:
    return HelpDispatchService(cli_context.runner, cli_context.settings)


def puppet_agent_service(cli_context: CLIContext) -> PuppetAgentService:
    return PuppetAgentService(cli_context.runner, cli_context.settings)


def certificate_service(cli_context: CLIContext) -> CertificateService:
    return CertificateService(cli_context.runner, cli_context.settings)
