"""remctl command domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

WILDCARD_SUBCOMMAND = "ALL"
HELP_SUBCOMMAND = "help"
HELP_CAPABLE_SUBCOMMANDS = frozenset({WILDCARD_SUBCOMMAND, HELP_SUBCOMMAND})


@dataclass(frozen=True)
class CommandEntry:
    """One remctl configuration record reduced to its first three tokens."""

    service: str
    subcommand: str
    executable_path: str

    @property
    def answers_help(self) -> bool:
        """True when remctld would route ``<service> help`` to this entry."""
        return self.subcommand in HELP_CAPABLE_SUBCOMMANDS


@dataclass
class CommandTable:
    """Mapping of remctl service name to the executable that serves it.

    Adding an entry for a service that is already present replaces the
    earlier executable, so the last matching configuration line wins.
    """

    _executables: dict[str, str] = field(default_factory=dict)

    def add(self, entry: CommandEntry) -> None:
        self._executables[entry.service] = entry.executable_path

    def get(self, service: str) -> str | None:
        return self._executables.get(service)

    def services(self) -> list[str]:
        """Return the service names in lexicographic order."""
        return sorted(self._executables)

    def items(self) -> list[tuple[str, str]]:
        """Return ``(service, executable_path)`` pairs sorted by service."""
        return sorted(self._executables.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._executables)

    def __contains__(self, service: object) -> bool:
        return service in self._executables

    def __iter__(self) -> Iterator[str]:
        return iter(self.services())

    def __len__(self) -> int:
        return len(self._executables)
