from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable, Sequence

import pytest

from remctl_admin.app.config import AdminSettings
from remctl_admin.infrastructure.process import CommandResult
from remctl_admin.interfaces.cli.context import CLIContext


class StubRunner:
    """Command runner returning canned results and recording every call.

    Responses are looked up by the full argument tuple first, then by the
    program (first argument). Anything unknown succeeds with empty output.
    """

    def __init__(self, responses: dict[object, CommandResult] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[tuple[str, ...], float | None]] = []

    def run(
        self, args: Sequence[str], *, timeout: float | None = None
    ) -> CommandResult:
        argv = tuple(str(arg) for arg in args)
        self.calls.append((argv, timeout))
        canned = self.responses.get(argv) or self.responses.get(argv[0])
        if canned is None:
            return CommandResult(args=argv, returncode=0)
        return CommandResult(
            args=argv,
            returncode=canned.returncode,
            stdout=canned.stdout,
            stderr=canned.stderr,
            error=canned.error,
        )

    @property
    def argvs(self) -> list[tuple[str, ...]]:
        return [argv for argv, _ in self.calls]


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(args=(), returncode=0, stdout=stdout)


def failed(returncode: int | None = 1, stderr: str = "", error: str | None = None) -> CommandResult:
    return CommandResult(args=(), returncode=returncode, stderr=stderr, error=error)


@pytest.fixture
def stub_runner() -> StubRunner:
    return StubRunner()


@pytest.fixture
def make_executable(tmp_path: Path) -> Callable[[str], Path]:
    """Create an (unused) executable script under tmp_path/bin."""

    def _make(name: str) -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        path = bin_dir / name
        path.write_text("#!/bin/sh\necho help\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR)
        return path

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> AdminSettings:
    state_dir = tmp_path / "state"
    ca_dir = tmp_path / "ca"
    return AdminSettings(
        remctl_config_dir=tmp_path / "remctl.d",
        agent_disabled_lockfile=state_dir / "agent_disabled.lock",
        agent_catalog_run_lockfile=state_dir / "agent_catalog_run.lock",
        last_run_summary=state_dir / "last_run_summary.yaml",
        csr_dir=ca_dir / "requests",
        signed_dir=ca_dir / "signed",
        mail_from="puppet@example.org",
    )


@pytest.fixture
def cli_context(settings: AdminSettings, stub_runner: StubRunner) -> CLIContext:
    return CLIContext(settings=settings, runner=stub_runner)
