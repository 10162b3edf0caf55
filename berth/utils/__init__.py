"""Console, logging and error-handling helpers for the berth CLI."""

from .console import (
    create_table,
    get_console,
    get_error_console,
    print_error,
    print_info,
    print_success,
    print_warning,
    reset_consoles,
)
from .decorators import handle_errors
from .logging import log_level, setup_logging

__all__ = [
    "create_table",
    "get_console",
    "get_error_console",
    "handle_errors",
    "log_level",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "reset_consoles",
    "setup_logging",
]
