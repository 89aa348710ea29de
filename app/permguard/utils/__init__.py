"""Utility modules for permguard.

This module exports commonly used utility functions.
"""

from permguard.utils.formatting import (
    console,
    create_violation_table,
    err_console,
    format_mode,
    format_result_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_violation_table",
    "err_console",
    "format_mode",
    "format_result_row",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
