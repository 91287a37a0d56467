"""Wrapper around ``puppet agent`` for the run, lock and status commands.

The agent keeps its administrative state in small files under its state
directory: ``agent_disabled.lock`` (JSON with a ``disabled_message``) while
the agent is disabled, ``agent_catalog_run.lock`` (the pid) while a catalog
run is in progress, and ``last_run_summary.yaml`` after every run. Status is
read straight from those files; every change goes through the puppet binary.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from remctl_admin.infrastructure.process import CommandResult
from remctl_admin.services.base import BaseService
from remctl_admin.services.dto import AgentStatus

RUN_OPTIONS = ("--onetime", "--no-daemonize", "--verbose", "--no-splay", "--detailed-exitcodes")
# --detailed-exitcodes: 0 = no changes, 2 = changes applied
SUCCESS_EXIT_CODES = frozenset({0, 2})


class PuppetCommandError(Exception):
    """Raised when the puppet binary fails or cannot be started."""

    def __init__(self, message: str, result: CommandResult | None = None) -> None:
        super().__init__(message)
        self.result = result


class AgentDisabledError(Exception):
    """Raised when a run is requested while the agent is disabled."""

    def __init__(self, message: str | None) -> None:
        text = "Puppet agent is disabled"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
        self.disabled_message = message


def invoking_user() -> str:
    """Return the human behind this invocation, looking through sudo."""
    return os.getenv("SUDO_USER") or os.getenv("USER") or "UNKNOWN"


def run_succeeded(result: CommandResult) -> bool:
    """True when a ``--detailed-exitcodes`` run applied cleanly."""
    return result.returncode in SUCCESS_EXIT_CODES


class PuppetAgentService(BaseService):
    """Service exposing the puppet agent wrapper operations."""

    def _agent(self, *args: str) -> list[str]:
        return [self.settings.puppet_bin, "agent", *args]

    def _checked(self, args: list[str], action: str) -> CommandResult:
        result = self._runner.run(args)
        if not result.ok:
            self._logger.warning("puppet agent %s failed: %s", action, result.describe_failure())
            raise PuppetCommandError(
                f"puppet agent {action} {result.describe_failure()}", result
            )
        return result

    def status(self) -> AgentStatus:
        """Read lock and last-run state from the agent's state files."""
        status = AgentStatus()

        disabled_lock = Path(self.settings.agent_disabled_lockfile)
        if disabled_lock.exists():
            status.disabled = True
            status.disabled_message = _read_disabled_message(disabled_lock)

        run_lock = Path(self.settings.agent_catalog_run_lockfile)
        if run_lock.exists():
            status.running = True
            status.running_pid = _read_pid(run_lock)

        summary = Path(self.settings.last_run_summary)
        if summary.exists():
            status.last_run_at = datetime.fromtimestamp(
                summary.stat().st_mtime, tz=timezone.utc
            )
        return status

    def run(self, extra_args: Sequence[str] = (), *, noop: bool = False) -> CommandResult:
        """Run the agent once in the foreground.

        Raises:
            AgentDisabledError: If the agent is administratively disabled.
            PuppetCommandError: If the puppet binary could not be started.
        """
        current = self.status()
        if current.disabled:
            raise AgentDisabledError(current.disabled_message)

        options = list(RUN_OPTIONS)
        if noop:
            options.append("--noop")
        options.extend(extra_args)
        self._logger.info("Starting puppet agent run (noop=%s)", noop)
        result = self._runner.run(self._agent(*options))
        if result.returncode is None:
            raise PuppetCommandError(
                f"puppet agent run {result.describe_failure()}", result
            )
        if not run_succeeded(result):
            self._logger.warning("puppet agent run exited with status %s", result.returncode)
        return result

    def lock(self, message: str | None = None) -> CommandResult:
        """Disable the agent with a reason recorded in its lock file."""
        reason = message or f"locked by {invoking_user()} via remctl-admin"
        self._logger.info("Disabling puppet agent: %s", reason)
        return self._checked(self._agent("--disable", reason), "--disable")

    def unlock(self) -> CommandResult:
        """Re-enable a disabled agent."""
        self._logger.info("Enabling puppet agent")
        return self._checked(self._agent("--enable"), "--enable")

    def fingerprint(self) -> str:
        """Return the agent certificate fingerprint as printed by puppet."""
        result = self._checked(self._agent("--fingerprint"), "--fingerprint")
        return result.stdout.strip()


def _read_disabled_message(path: Path) -> str | None:
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if isinstance(data, dict):
        message = data.get("disabled_message")
        return str(message) if message else None
    return None


def _read_pid(path: Path) -> int | None:
    try:
        return int(path.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return None
