"""remctl configuration adapters."""

from .loader import (
    ConfigDirectoryError,
    iter_logical_lines,
    load_logical_lines,
    unfold_lines,
)
from .parser import build_command_table, parse_command_line

__all__ = [
    "ConfigDirectoryError",
    "build_command_table",
    "iter_logical_lines",
    "load_logical_lines",
    "parse_command_line",
    "unfold_lines",
]
