from __future__ import annotations

import logging
from pathlib import Path

import pytest

from remctl_admin.infrastructure.remctl import loader
from remctl_admin.infrastructure.remctl import (
    ConfigDirectoryError,
    iter_logical_lines,
    load_logical_lines,
    unfold_lines,
)


def _write(directory: Path, name: str, text: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def test_continuation_joins_into_one_line(tmp_path: Path) -> None:
    path = _write(tmp_path, "svc", "foo bar \\\n  baz\n")

    assert list(iter_logical_lines(path)) == ["foo bar baz"]


def test_multi_line_continuation() -> None:
    lines = ["puppet ALL /usr/sbin/puppet-remctl \\\n", "   ANYUSER \\\n", "   group:ops\n"]

    assert list(unfold_lines(lines)) == ["puppet ALL /usr/sbin/puppet-remctl ANYUSER group:ops"]


def test_comment_only_file_yields_nothing(tmp_path: Path) -> None:
    path = _write(tmp_path, "comments", "# one\n    # two\n\t#three\n")

    assert list(iter_logical_lines(path)) == []


def test_hash_inside_line_is_not_a_comment() -> None:
    assert list(unfold_lines(["svc ALL /bin/true # trailing\n"])) == [
        "svc ALL /bin/true # trailing"
    ]


def test_comment_between_continued_lines_is_skipped() -> None:
    lines = ["svc ALL \\\n", "# explanation\n", "/bin/true\n"]

    assert list(unfold_lines(lines)) == ["svc ALL /bin/true"]


def test_unterminated_continuation_is_emitted_at_eof() -> None:
    assert list(unfold_lines(["svc ALL \\\n", "/bin/true \\\n"])) == ["svc ALL /bin/true"]


def test_plain_lines_are_emitted_in_order() -> None:
    lines = ["first line\n", "\n", "second line\n"]

    assert list(unfold_lines(lines)) == ["first line", "", "second line"]


def test_empty_file_yields_nothing(tmp_path: Path) -> None:
    path = _write(tmp_path, "empty", "")

    assert list(iter_logical_lines(path)) == []


def test_load_reads_every_regular_file(tmp_path: Path) -> None:
    config_dir = tmp_path / "conf.d"
    _write(config_dir, "a", "svc1 ALL /bin/true\n")
    _write(config_dir, "b", "svc2 help \\\n  /bin/echo\n")
    (config_dir / "nested").mkdir()
    _write(config_dir / "nested", "ignored", "svc3 ALL /bin/true\n")

    lines = load_logical_lines(config_dir)

    assert sorted(lines) == ["svc1 ALL /bin/true", "svc2 help /bin/echo"]


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigDirectoryError, match="does not exist"):
        load_logical_lines(tmp_path / "missing")


def test_file_instead_of_directory_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "conf", "svc ALL /bin/true\n")

    with pytest.raises(ConfigDirectoryError, match="not a directory"):
        load_logical_lines(path)


def test_unreadable_file_is_skipped_with_warning(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    config_dir = tmp_path / "conf.d"
    _write(config_dir, "good", "svc1 ALL /bin/true\n")
    _write(config_dir, "secret", "svc2 ALL /bin/true\n")
    real_iter = loader.iter_logical_lines

    def fake_iter(path: Path):
        if Path(path).name == "secret":
            raise PermissionError(13, "Permission denied", str(path))
        return real_iter(path)

    monkeypatch.setattr(loader, "iter_logical_lines", fake_iter)

    with caplog.at_level(logging.WARNING):
        lines = load_logical_lines(config_dir)

    assert lines == ["svc1 ALL /bin/true"]
    assert "Skipping unreadable configuration file" in caplog.text
    assert "secret" in caplog.text
