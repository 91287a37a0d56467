"""Domain layer facade for remctl-admin.

This package groups the plain models that do not concern infrastructure or
interface details.
"""

from . import models

__all__ = ["models"]
