"""Service layer modules for remctl-admin."""

from .certificates import (  # noqa: F401
    CertificateCommandError,
    CertificateDirectoryError,
    CertificateNotFoundError,
    CertificateService,
)
from .help_dispatch import HelpDispatchService  # noqa: F401
from .puppet_agent import (  # noqa: F401
    AgentDisabledError,
    PuppetAgentService,
    PuppetCommandError,
)

__all__ = [
    "AgentDisabledError",
    "CertificateCommandError",
    "CertificateDirectoryError",
    "CertificateNotFoundError",
    "CertificateService",
    "HelpDispatchService",
    "PuppetAgentService",
    "PuppetCommandError",
]
