"""CLI interface for remctl-admin.

This package is the home for all Click commands. ``cli`` is the
``remctl-admin`` group; ``commands`` is also installed on its own as
``remctl-help``.
"""

from .__main__ import cli
from .agent import agent
from .certs import certs
from .commands import commands

__all__ = ["agent", "certs", "cli", "commands"]
