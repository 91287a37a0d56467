"""Discover remctl services and collect their help output."""

from __future__ import annotations

from pathlib import Path

from remctl_admin.domain.models import CommandTable
from remctl_admin.infrastructure.observability import log_context
from remctl_admin.infrastructure.remctl import build_command_table, load_logical_lines
from remctl_admin.services.base import BaseService
from remctl_admin.services.dto import HelpBlock


class HelpDispatchService(BaseService):
    """Build the remctl command table and run ``help`` for each service.

    One failing help program never stops the batch: its block carries a
    warning instead of output.
    """

    def discover(self, config_dir: Path | str | None = None) -> CommandTable:
        """Read the remctl configuration and return the help-capable commands.

        Raises:
            ConfigDirectoryError: If the configuration directory cannot be read.
        """
        directory = Path(
            config_dir if config_dir is not None else self.settings.remctl_config_dir
        )
        lines = load_logical_lines(directory)
        table = build_command_table(lines)
        self._logger.debug(
            "Discovered %d remctl services in %s", len(table), directory
        )
        return table

    def summary(self, table: CommandTable) -> list[str]:
        """Return the service names in lexicographic order."""
        return table.services()

    def collect(self, table: CommandTable) -> list[HelpBlock]:
        """Run every discovered executable with the help argument."""
        return [
            self.collect_one(service, executable)
            for service, executable in table.items()
        ]

    def collect_one(self, service: str, executable_path: str) -> HelpBlock:
        with log_context(service=service, executable=executable_path):
            result = self._runner.run(
                [executable_path, self.settings.help_argument],
                timeout=self.settings.help_timeout_seconds,
            )
            warning = None
            if not result.ok:
                warning = f"{executable_path} {result.describe_failure()}"
                self._logger.warning("Help for %s failed: %s", service, warning)
        return HelpBlock(
            service=service,
            executable_path=executable_path,
            text=result.stdout,
            warning=warning,
        )
