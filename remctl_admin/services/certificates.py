"""Certificate signing request management for the Puppet CA.

Pending requests are the ``<certname>.pem`` files in the CA's requests
directory; signed certificates live as ``<certname>.pem`` in the signed
directory. Listing, searching and deleting work on those files directly.
Signing and cleaning go through the CA command (``puppetserver ca`` by
default) with a bounded timeout.
"""

from __future__ import annotations

import re
import smtplib
import socket
from datetime import datetime, timezone
from email.message import EmailMessage
from pathlib import Path
from typing import Callable, Iterable, Sequence

from remctl_admin.domain.models import (
    CertificateMatch,
    CertificateRequest,
    CertificateState,
)
from remctl_admin.infrastructure.observability import log_context, log_exception
from remctl_admin.services.base import BaseService
from remctl_admin.services.dto import CertificateActionResult

SmtpFactory = Callable[[str, int], smtplib.SMTP]


class CertificateDirectoryError(Exception):
    """Raised when the CSR directory is missing, unreadable or cannot be changed."""


class CertificateNotFoundError(Exception):
    """Raised when a named request is not pending on the CA."""


class CertificateCommandError(Exception):
    """Raised when the CA command fails for a certificate."""


def _pem_files(directory: Path) -> list[Path]:
    return sorted(path for path in directory.glob("*.pem") if path.is_file())


class CertificateService(BaseService):
    """List, search, sign, clean, delete and report certificate requests."""

    # -------------------- scanning --------------------
    def list_requests(self) -> list[CertificateRequest]:
        """Return the pending requests sorted by certificate name.

        Raises:
            CertificateDirectoryError: If the CSR directory cannot be read.
        """
        csr_dir = Path(self.settings.csr_dir)
        if not csr_dir.is_dir():
            raise CertificateDirectoryError(f"CSR directory {csr_dir} does not exist")
        try:
            files = _pem_files(csr_dir)
        except OSError as exc:
            raise CertificateDirectoryError(
                f"Cannot read CSR directory {csr_dir}: {exc.strerror or exc}"
            ) from exc
        requests = [CertificateRequest.from_path(path) for path in files]
        self._logger.debug("Found %d pending requests in %s", len(requests), csr_dir)
        return requests

    def list_signed(self) -> list[str]:
        """Return the names of signed certificates, or nothing if unavailable."""
        signed_dir = Path(self.settings.signed_dir)
        if not signed_dir.is_dir():
            self._logger.debug("Signed directory %s not present", signed_dir)
            return []
        return [path.name[: -len(".pem")] for path in _pem_files(signed_dir)]

    def find(self, pattern: str) -> list[CertificateMatch]:
        """Search pending and signed certificate names with a regex.

        Matching is case-insensitive and unanchored.

        Raises:
            ValueError: If ``pattern`` is not a valid regular expression.
        """
        try:
            regex = re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            raise ValueError(f"Invalid pattern '{pattern}': {exc}") from exc

        matches = [
            CertificateMatch(request.name, CertificateState.PENDING, request.path)
            for request in self.list_requests()
            if regex.search(request.name)
        ]
        signed_dir = Path(self.settings.signed_dir)
        matches.extend(
            CertificateMatch(name, CertificateState.SIGNED, signed_dir / f"{name}.pem")
            for name in self.list_signed()
            if regex.search(name)
        )
        return sorted(matches, key=lambda match: (match.name, match.state.value))

    def _pending_by_name(self, names: Iterable[str]) -> list[CertificateRequest]:
        names = list(dict.fromkeys(names))
        pending = {request.name: request for request in self.list_requests()}
        missing = [name for name in names if name not in pending]
        if missing:
            raise CertificateNotFoundError(
                "No pending request for: " + ", ".join(sorted(missing))
            )
        return [pending[name] for name in names]

    # -------------------- CA actions --------------------
    def _ca(self, action: str, name: str) -> CertificateActionResult:
        args = [*self.settings.ca_command, action, "--certname", name]
        with log_context(certname=name, action=action):
            result = self._runner.run(args, timeout=self.settings.command_timeout_seconds)
            if not result.ok:
                self._logger.warning("CA %s failed: %s", action, result.describe_failure())
                raise CertificateCommandError(
                    f"{' '.join(self.settings.ca_command)} {action} {name} "
                    f"{result.describe_failure()}"
                )
            self._logger.info("CA %s succeeded", action)
        return CertificateActionResult(name=name, action=action, output=result.stdout)

    def sign(
        self, names: Sequence[str] = (), *, all_pending: bool = False
    ) -> list[CertificateActionResult]:
        """Sign the named pending requests, or every pending one.

        All names are checked before anything is signed; repeated names are
        signed once.
        """
        if all_pending:
            targets = [request.name for request in self.list_requests()]
        else:
            targets = [request.name for request in self._pending_by_name(names)]
        return [self._ca("sign", name) for name in targets]

    def clean(self, names: Sequence[str]) -> list[CertificateActionResult]:
        """Revoke and remove the named certificates on the CA."""
        return [self._ca("clean", name) for name in dict.fromkeys(names)]

    def delete(self, names: Sequence[str]) -> list[CertificateRequest]:
        """Remove pending request files without contacting the CA."""
        requests = self._pending_by_name(names)
        for request in requests:
            try:
                request.path.unlink()
            except OSError as exc:
                raise CertificateDirectoryError(
                    f"Cannot delete {request.path}: {exc.strerror}"
                ) from exc
            self._logger.info("Deleted pending request %s", request.name)
        return requests

    # -------------------- reporting --------------------
    def hostname(self) -> str:
        """Return this host's FQDN from facter, falling back to the resolver."""
        result = self._runner.run(
            [self.settings.facter_bin, "fqdn"],
            timeout=self.settings.command_timeout_seconds,
        )
        fqdn = result.stdout.strip() if result.ok else ""
        if not fqdn:
            self._logger.debug("facter fqdn unavailable: %s", result.describe_failure())
            fqdn = socket.getfqdn()
        return fqdn

    def build_report(
        self,
        requests: Sequence[CertificateRequest],
        hostname: str,
        now: datetime | None = None,
    ) -> str:
        current = now or datetime.now(timezone.utc)
        if not requests:
            return f"No pending certificate requests on {hostname}.\n"
        width = max(len(request.name) for request in requests)
        lines = [
            f"{len(requests)} pending certificate request(s) on {hostname}:",
            "",
        ]
        for request in requests:
            stamp = request.requested_at.strftime("%Y-%m-%d %H:%M")
            lines.append(
                f"  {request.name:<{width}}  {stamp} UTC  "
                f"({request.age_days(current)} day(s) old)"
            )
        return "\n".join(lines) + "\n"

    def send_report(
        self,
        report: str,
        recipients: Sequence[str],
        hostname: str,
        smtp_factory: SmtpFactory = smtplib.SMTP,
    ) -> EmailMessage:
        """Mail ``report`` to ``recipients`` through the configured SMTP relay."""
        message = EmailMessage()
        message["Subject"] = f"Pending Puppet certificate requests on {hostname}"
        message["From"] = self.settings.mail_from or f"root@{hostname}"
        message["To"] = ", ".join(recipients)
        message.set_content(report)

        try:
            with smtp_factory(self.settings.smtp_host, self.settings.smtp_port) as smtp:
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            log_exception(
                self._logger,
                "Mailing certificate report failed",
                exc,
                smtp_host=self.settings.smtp_host,
            )
            raise
        self._logger.info("Mailed certificate report to %s", message["To"])
        return message
