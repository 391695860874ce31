"""Utility modules for cachectl.

This module exports commonly used utility functions.
"""

from cachectl.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_plain,
    print_success,
    print_warning,
)
from cachectl.utils.log import configure_logging

__all__ = [
    "configure_logging",
    "console",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_plain",
    "print_success",
    "print_warning",
]
