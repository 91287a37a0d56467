"""Interface layer for remctl-admin.

Packages under ``remctl_admin.interfaces`` expose boundary adapters such as
CLI commands.
"""

from . import cli

__all__ = ["cli"]
