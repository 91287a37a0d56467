"""Launch external programs and capture what they print.

Every shell-out in remctl-admin (help scripts, ``puppet``, ``puppetserver``,
``facter``) goes through a :class:`CommandRunner`. Services receive a runner
at construction time so tests can substitute canned results without touching
real binaries.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from typing import Mapping, Protocol, Sequence

from remctl_admin.infrastructure.observability import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external program invocation.

    ``returncode`` is ``None`` when the program never produced an exit status,
    either because it could not be started or because it timed out. In that
    case ``error`` describes what went wrong.
    """

    args: tuple[str, ...]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe_failure(self) -> str:
        """Return a one-line description of why the command did not succeed."""
        if self.error:
            return self.error
        detail = self.stderr.strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        return f"exited with status {self.returncode}{suffix}"


class CommandRunner(Protocol):
    """Anything that can run an argument vector and report the result."""

    def run(
        self, args: Sequence[str], *, timeout: float | None = None
    ) -> CommandResult:
        ...


@dataclass
class SubprocessRunner:
    """Run programs with :func:`subprocess.run`, capturing text output.

    Failures to launch and timeouts are reported through the returned
    :class:`CommandResult` instead of being raised.
    """

    default_timeout: float | None = None
    path: str | None = None
    extra_env: Mapping[str, str] = field(default_factory=dict)

    def _environment(self) -> dict[str, str] | None:
        if self.path is None and not self.extra_env:
            return None
        env = dict(os.environ)
        if self.path is not None:
            env["PATH"] = self.path
        env.update(self.extra_env)
        return env

    def run(
        self, args: Sequence[str], *, timeout: float | None = None
    ) -> CommandResult:
        argv = tuple(str(arg) for arg in args)
        effective_timeout = timeout if timeout is not None else self.default_timeout
        _logger.debug("Running %s (timeout=%s)", " ".join(argv), effective_timeout)
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                env=self._environment(),
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            _logger.warning("%s timed out after %ss", argv[0], effective_timeout)
            return CommandResult(
                args=argv,
                returncode=None,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                error=f"timed out after {effective_timeout}s",
            )
        except OSError as exc:
            _logger.warning("Could not execute %s: %s", argv[0], exc)
            return CommandResult(
                args=argv,
                returncode=None,
                error=f"could not be executed: {exc.strerror or exc}",
            )

        _logger.debug("%s exited with status %d", argv[0], completed.returncode)
        return CommandResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def _as_text(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
