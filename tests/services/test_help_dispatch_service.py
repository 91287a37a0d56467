from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import StubRunner, failed, ok
from remctl_admin.app.config import AdminSettings
from remctl_admin.infrastructure.process import CommandResult
from remctl_admin.infrastructure.remctl import ConfigDirectoryError
from remctl_admin.services import HelpDispatchService


def _config(settings: AdminSettings, text: str, name: str = "services") -> None:
    config_dir = Path(settings.remctl_config_dir)
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / name).write_text(text, encoding="utf-8")


def test_end_to_end_discovery(settings: AdminSettings, make_executable) -> None:
    true_bin = make_executable("true")
    false_bin = make_executable("false")
    echo_bin = make_executable("echo")
    _config(
        settings,
        "# comment\n"
        f"svc1 ALL {true_bin}\n"
        f"svc2 deny {false_bin}\n"
        f"svc3 help {echo_bin}\n",
    )
    service = HelpDispatchService(StubRunner(), settings)

    table = service.discover()

    assert table.as_dict() == {"svc1": str(true_bin), "svc3": str(echo_bin)}
    assert service.summary(table) == ["svc1", "svc3"]


def test_discover_across_files_keeps_last_entry(
    settings: AdminSettings, make_executable
) -> None:
    first = make_executable("first")
    second = make_executable("second")
    _config(settings, f"shared ALL {first}\nonly-a ALL {first}\n", name="a")
    _config(settings, f"shared help {second}\n", name="b")

    table = HelpDispatchService(StubRunner(), settings).discover()

    assert sorted(table.services()) == ["only-a", "shared"]
    assert table.get("shared") in {str(first), str(second)}


def test_discover_uses_explicit_directory(tmp_path: Path, settings: AdminSettings, make_executable) -> None:
    tool = make_executable("tool")
    other_dir = tmp_path / "other"
    other_dir.mkdir()
    (other_dir / "conf").write_text(f"tool ALL {tool}\n", encoding="utf-8")

    table = HelpDispatchService(StubRunner(), settings).discover(other_dir)

    assert table.services() == ["tool"]


def test_discover_missing_directory(settings: AdminSettings) -> None:
    with pytest.raises(ConfigDirectoryError):
        HelpDispatchService(StubRunner(), settings).discover()


def test_collect_runs_help_in_service_order(settings: AdminSettings, make_executable) -> None:
    beta = make_executable("beta")
    alpha = make_executable("alpha")
    _config(settings, f"beta ALL {beta}\nalpha help {alpha}\n")
    runner = StubRunner(
        {
            str(alpha): ok("alpha usage\n"),
            str(beta): ok("beta usage\n"),
        }
    )
    service = HelpDispatchService(runner, settings)

    blocks = service.collect(service.discover())

    assert [block.service for block in blocks] == ["alpha", "beta"]
    assert blocks[0].text == "alpha usage\n"
    assert blocks[0].warning is None
    assert runner.argvs == [(str(alpha), "help"), (str(beta), "help")]


def test_failing_help_gets_warning_and_batch_continues(
    settings: AdminSettings, make_executable, caplog: pytest.LogCaptureFixture
) -> None:
    broken = make_executable("broken")
    fine = make_executable("fine")
    _config(settings, f"broken ALL {broken}\nfine ALL {fine}\n")
    runner = StubRunner(
        {
            str(broken): failed(returncode=None, error="could not be executed: Exec format error"),
            str(fine): ok("fine usage\n"),
        }
    )
    service = HelpDispatchService(runner, settings)

    with caplog.at_level(logging.WARNING):
        blocks = service.collect(service.discover())

    assert blocks[0].service == "broken"
    assert blocks[0].text == ""
    assert "could not be executed" in (blocks[0].warning or "")
    assert blocks[1].text == "fine usage\n"
    assert blocks[1].warning is None
    assert "Help for broken failed" in caplog.text


def test_non_zero_exit_keeps_output(settings: AdminSettings, make_executable) -> None:
    grumpy = make_executable("grumpy")
    _config(settings, f"grumpy help {grumpy}\n")
    runner = StubRunner(
        {
            str(grumpy): CommandResult(
                args=(), returncode=2, stdout="partial\n", stderr="unknown command\n"
            )
        }
    )
    service = HelpDispatchService(runner, settings)

    [block] = service.collect(service.discover())

    assert block.text == "partial\n"
    assert block.warning == f"{grumpy} exited with status 2: unknown command"


def test_help_argument_and_timeout_come_from_settings(
    settings: AdminSettings, make_executable
) -> None:
    tool = make_executable("tool")
    custom = settings.model_copy(
        update={"help_argument": "--help", "help_timeout_seconds": 5.0}
    )
    _config(custom, f"tool ALL {tool}\n")
    runner = StubRunner()
    service = HelpDispatchService(runner, custom)

    service.collect(service.discover())

    assert runner.calls == [((str(tool), "--help"), 5.0)]
