"""Domain models package.

This package contains the plain data classes shared by the services.
"""

from .certificate import CertificateMatch, CertificateRequest, CertificateState
from .command import (
    HELP_CAPABLE_SUBCOMMANDS,
    HELP_SUBCOMMAND,
    WILDCARD_SUBCOMMAND,
    CommandEntry,
    CommandTable,
)

__all__ = [
    "CertificateMatch",
    "CertificateRequest",
    "CertificateState",
    "CommandEntry",
    "CommandTable",
    "HELP_CAPABLE_SUBCOMMANDS",
    "HELP_SUBCOMMAND",
    "WILDCARD_SUBCOMMAND",
]
