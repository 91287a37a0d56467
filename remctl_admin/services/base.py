"""Base service class with shared runner and settings wiring.

This module provides a base class for service layer implementations,
standardizing how external programs are launched and how logging is set up.
"""

from __future__ import annotations

from remctl_admin.app.config import AdminSettings
from remctl_admin.infrastructure.observability import get_logger
from remctl_admin.infrastructure.process import CommandRunner


class BaseService:
    """Base class for services that shell out to external programs.

    Provides shared infrastructure for:
    - Runner injection (a stub runner in tests, subprocesses in production)
    - Access to the resolved settings
    - Consistent logging setup

    Example usage:
        # Production usage:
        service = PuppetAgentService(SubprocessRunner(), settings)

        # Test usage with a stub:
        service = PuppetAgentService(stub_runner, settings)
    """

    def __init__(
        self, runner: CommandRunner, settings: AdminSettings | None = None
    ) -> None:
        """Initialize service with a command runner.

        Args:
            runner: Object whose ``run(args, timeout=...)`` launches programs
            settings: Resolved settings; defaults apply when omitted
        """
        self._runner = runner
        self._settings = settings or AdminSettings()
        self._logger = get_logger(self.__class__.__module__)

    @property
    def settings(self) -> AdminSettings:
        return self._settings
