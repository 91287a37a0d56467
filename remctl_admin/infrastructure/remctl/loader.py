"""Read remctl configuration files into logical lines.

remctl configuration is line oriented: ``#`` starts a full-line comment and a
trailing backslash continues a statement on the next physical line. This
module unfolds those continuations so the parser only ever sees one complete
statement per line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from remctl_admin.infrastructure.observability import get_logger

_logger = get_logger(__name__)

CONTINUATION = "\\"
COMMENT = "#"


class ConfigDirectoryError(Exception):
    """Raised when the remctl configuration directory cannot be read."""


def unfold_lines(physical_lines: Iterable[str]) -> Iterator[str]:
    """Yield logical lines from an iterable of physical lines."""
    pending: list[str] = []
    for raw in physical_lines:
        line = raw.rstrip("\r\n")
        if line.lstrip().startswith(COMMENT):
            continue
        trimmed = line.rstrip()
        if trimmed.endswith(CONTINUATION):
            piece = trimmed[: -len(CONTINUATION)].strip()
            if piece:
                pending.append(piece)
            continue
        if pending:
            piece = line.strip()
            if piece:
                pending.append(piece)
            yield " ".join(pending)
            pending = []
            continue
        yield line
    # Unterminated continuation at end of input
    if pending:
        yield " ".join(pending)


def iter_logical_lines(path: Path | str) -> Iterator[str]:
    """Yield the logical lines of a single configuration file."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        yield from unfold_lines(f)


def _config_files(directory: Path) -> list[Path]:
    if not directory.exists():
        raise ConfigDirectoryError(f"Configuration directory {directory} does not exist")
    if not directory.is_dir():
        raise ConfigDirectoryError(f"{directory} is not a directory")
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise ConfigDirectoryError(
            f"Cannot read configuration directory {directory}: {exc.strerror or exc}"
        ) from exc
    return [entry for entry in entries if entry.is_file()]


def load_logical_lines(directory: Path | str) -> list[str]:
    """Return the logical lines of every regular file in ``directory``.

    Lines keep their per-file order. Files are visited in name order, but
    callers should not rely on any ordering across files.

    Raises:
        ConfigDirectoryError: If the directory is missing or unreadable.
    """
    config_dir = Path(directory)
    lines: list[str] = []
    for path in _config_files(config_dir):
        try:
            file_lines = list(iter_logical_lines(path))
        except OSError as exc:
            _logger.warning("Skipping unreadable configuration file %s: %s", path, exc)
            continue
        _logger.debug("Read %d logical lines from %s", len(file_lines), path)
        lines.extend(file_lines)
    return lines
