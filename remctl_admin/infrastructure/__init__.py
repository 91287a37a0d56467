"""Infrastructure layer for remctl-admin.

Holds adapters for reading remctl configuration, launching external programs
and logging. Nothing in here knows about click or the CLI.
"""

from . import observability, process, remctl

__all__ = ["observability", "process", "remctl"]
