from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from conftest import StubRunner, failed, ok
from remctl_admin.interfaces.cli import cli
from remctl_admin.interfaces.cli.context import CLIContext


def _stub(cli_context: CLIContext) -> StubRunner:
    return cli_context.runner  # type: ignore[return-value]


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_run_passes_extra_arguments(cli_context: CLIContext) -> None:
    _stub(cli_context).responses["puppet"] = ok("Notice: Applied catalog in 3.2 seconds\n")

    result = CliRunner().invoke(
        cli, ["agent", "run", "--tags", "ntp"], obj=cli_context
    )

    assert result.exit_code == 0, result.output
    assert "Applied catalog" in result.output
    argv = _stub(cli_context).argvs[0]
    assert argv[:2] == ("puppet", "agent")
    assert argv[-2:] == ("--tags", "ntp")
    assert "--noop" not in argv


def test_changes_applied_exit_code_counts_as_success(cli_context: CLIContext) -> None:
    _stub(cli_context).responses["puppet"] = failed(returncode=2)

    result = CliRunner().invoke(cli, ["agent", "run"], obj=cli_context)

    assert result.exit_code == 0


def test_run_failure_propagates_exit_code(cli_context: CLIContext) -> None:
    _stub(cli_context).responses["puppet"] = failed(returncode=4)

    result = CliRunner().invoke(cli, ["agent", "run"], obj=cli_context)

    assert result.exit_code == 4


def test_noop_command(cli_context: CLIContext) -> None:
    result = CliRunner().invoke(cli, ["agent", "noop"], obj=cli_context)

    assert result.exit_code == 0, result.output
    assert _stub(cli_context).argvs[0][-1] == "--noop"


def test_run_refused_while_locked(cli_context: CLIContext) -> None:
    _write(
        cli_context.settings.agent_disabled_lockfile,
        json.dumps({"disabled_message": "maintenance window"}),
    )

    result = CliRunner().invoke(cli, ["agent", "run"], obj=cli_context)

    assert result.exit_code == 1
    assert "maintenance window" in result.output
    assert _stub(cli_context).calls == []


def test_lock_joins_message_words(cli_context: CLIContext) -> None:
    result = CliRunner().invoke(
        cli, ["agent", "lock", "kernel", "upgrade"], obj=cli_context
    )

    assert result.exit_code == 0, result.output
    assert "Puppet agent locked." in result.output
    assert _stub(cli_context).argvs == [
        ("puppet", "agent", "--disable", "kernel upgrade")
    ]


def test_unlock_failure(cli_context: CLIContext) -> None:
    _stub(cli_context).responses["puppet"] = failed(returncode=1, stderr="Error: denied\n")

    result = CliRunner().invoke(cli, ["agent", "unlock"], obj=cli_context)

    assert result.exit_code == 1
    assert "denied" in result.output


def test_status_json(cli_context: CLIContext) -> None:
    _write(cli_context.settings.agent_catalog_run_lockfile, "77\n")

    result = CliRunner().invoke(
        cli, ["agent", "status", "--json-output"], obj=cli_context
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["disabled"] is False
    assert payload["running"] is True
    assert payload["running_pid"] == 77
    assert payload["last_run_at"] is None


def test_status_table(cli_context: CLIContext) -> None:
    _write(
        cli_context.settings.agent_disabled_lockfile,
        json.dumps({"disabled_message": "db migration"}),
    )

    result = CliRunner().invoke(cli, ["agent", "status"], obj=cli_context)

    assert result.exit_code == 0, result.output
    assert "Locked" in result.output
    assert "db migration" in result.output
    assert "never" in result.output


def test_fingerprint(cli_context: CLIContext) -> None:
    _stub(cli_context).responses["puppet"] = ok("(SHA256) 01:02:03\n")

    result = CliRunner().invoke(cli, ["agent", "fingerprint"], obj=cli_context)

    assert result.exit_code == 0
    assert result.stdout == "(SHA256) 01:02:03\n"
