"""Configuration utilities for remctl-admin.

Settings come from an optional JSON file. The file is located from the
``--config`` option, then the ``REMCTL_ADMIN_CONFIG`` environment variable;
when neither names a file the built-in defaults apply. A named file that
does not exist is an error. Relative paths inside the file are resolved
against the file's own directory.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_ENV_VAR = "REMCTL_ADMIN_CONFIG"

_PATH_FIELDS = (
    "remctl_config_dir",
    "csr_dir",
    "signed_dir",
    "agent_disabled_lockfile",
    "agent_catalog_run_lockfile",
    "last_run_summary",
)


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


class AdminSettings(BaseModel):
    """All tunables for the remctl, puppet agent and certificate commands."""

    model_config = ConfigDict(extra="forbid")

    # remctl help discovery
    remctl_config_dir: Path = Path("/etc/remctl/conf.d")
    help_argument: str = "help"
    help_timeout_seconds: float | None = None

    # external binaries
    puppet_bin: str = "puppet"
    facter_bin: str = "facter"
    ca_command: list[str] = Field(default_factory=lambda: ["puppetserver", "ca"])
    bin_path: str | None = None
    command_timeout_seconds: float = 60.0

    # puppet agent state
    agent_disabled_lockfile: Path = Path(
        "/opt/puppetlabs/puppet/cache/state/agent_disabled.lock"
    )
    agent_catalog_run_lockfile: Path = Path(
        "/opt/puppetlabs/puppet/cache/state/agent_catalog_run.lock"
    )
    last_run_summary: Path = Path(
        "/opt/puppetlabs/puppet/cache/state/last_run_summary.yaml"
    )

    # certificate authority
    csr_dir: Path = Path("/etc/puppetlabs/puppetserver/ca/requests")
    signed_dir: Path = Path("/etc/puppetlabs/puppetserver/ca/signed")

    # report mail
    smtp_host: str = "localhost"
    smtp_port: int = 25
    mail_from: str | None = None


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        A dictionary of configuration values.
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def resolve_config_path(config_path: str | Path | None = None) -> Path | None:
    """Return the configuration file to use, or ``None`` for defaults."""
    if config_path is not None:
        return Path(config_path).expanduser()
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return None


def load_settings(config_path: str | Path | None = None) -> AdminSettings:
    """Build :class:`AdminSettings` from the resolved configuration file.

    An explicitly named file that does not exist is an error; with no file
    named at all the defaults are returned.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    path = resolve_config_path(config_path)
    if path is None:
        return AdminSettings()
    try:
        raw = load_config(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file {path} does not exist") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")

    root = path.parent
    for key in _PATH_FIELDS:
        value = raw.get(key)
        if isinstance(value, str) and not Path(value).is_absolute():
            raw[key] = str((root / value).resolve())
    try:
        return AdminSettings(**raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc


__all__ = [
    "AdminSettings",
    "CONFIG_ENV_VAR",
    "ConfigError",
    "load_config",
    "load_settings",
    "resolve_config_path",
]
