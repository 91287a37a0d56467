"""Application wiring: settings shared by every interface."""

from .config import AdminSettings, ConfigError, load_settings

__all__ = ["AdminSettings", "ConfigError", "load_settings"]
