"""Certificate request domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path


class CertificateState(str, Enum):
    """Where a certificate name was found on the CA."""

    PENDING = "pending"
    SIGNED = "signed"


@dataclass(frozen=True)
class CertificateRequest:
    """A pending certificate signing request stored as ``<name>.pem``."""

    name: str
    path: Path
    requested_at: datetime

    @classmethod
    def from_path(cls, path: Path) -> "CertificateRequest":
        """Build a request from a CSR file, using its mtime as request time."""
        mtime = path.stat().st_mtime
        return cls(
            name=path.name[: -len(".pem")] if path.name.endswith(".pem") else path.name,
            path=path,
            requested_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def age_days(self, now: datetime | None = None) -> int:
        """Return the number of whole days this request has been waiting."""
        current = now or datetime.now(timezone.utc)
        return max((current - self.requested_at).days, 0)


@dataclass(frozen=True)
class CertificateMatch:
    """A certificate name matched by a search, with its CA state."""

    name: str
    state: CertificateState
    path: Path
