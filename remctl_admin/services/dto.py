"""
Centralized DTOs for remctl-admin services.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict


# --- remctl help DTOs ---
class HelpBlock(BaseModel):
    model_config = ConfigDict(extra="forbid")

    service: str
    executable_path: str
    text: str = ""
    warning: str | None = None


# --- Puppet agent DTOs ---
class AgentStatus(BaseModel):
    """Snapshot of the local puppet agent's lock and run state."""

    model_config = ConfigDict(extra="forbid")

    disabled: bool = False
    disabled_message: str | None = None
    running: bool = False
    running_pid: int | None = None
    last_run_at: datetime | None = None


# --- Certificate DTOs ---
class CertificateActionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    action: str
    output: str = ""
