"""
remctl-admin package initializer.

This package provides administrative helpers for hosts running the remctl
daemon and Puppet: remctl help discovery, a ``puppet agent`` wrapper and a
certificate signing request manager.

The package exposes a ``__version__`` attribute read from the installed
distribution metadata via importlib.metadata.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("remctl-admin")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

__all__: list[str] = ["__version__"]
