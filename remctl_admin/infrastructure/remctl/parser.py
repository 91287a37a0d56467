"""Turn logical remctl configuration lines into a command table."""

from __future__ import annotations

import os
import re
from typing import Callable, Iterable

from remctl_admin.domain.models import CommandEntry, CommandTable
from remctl_admin.infrastructure.observability import get_logger

_logger = get_logger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


def parse_command_line(line: str) -> CommandEntry | None:
    """Parse ``<service> <subcommand> <executable> [acl...]``.

    Returns ``None`` for lines with fewer than three tokens, such as ACL group
    definitions or blank lines. Tokens beyond the third are ignored.
    """
    tokens = _WHITESPACE_RUN.sub(" ", line).strip().split(" ")
    if len(tokens) < 3:
        return None
    service, subcommand, executable_path = tokens[:3]
    return CommandEntry(service, subcommand, executable_path)


def build_command_table(
    lines: Iterable[str],
    is_file: Callable[[str], bool] = os.path.isfile,
) -> CommandTable:
    """Collect the help-capable entries whose executable exists.

    Only ``ALL`` and ``help`` subcommands are kept. Entries pointing at a
    missing executable are dropped without error. When a service appears more
    than once the last kept line wins.
    """
    table = CommandTable()
    for line in lines:
        entry = parse_command_line(line)
        if entry is None or not entry.answers_help:
            continue
        if not is_file(entry.executable_path):
            _logger.debug(
                "Ignoring %s: %s is not a file", entry.service, entry.executable_path
            )
            continue
        table.add(entry)
    return table
