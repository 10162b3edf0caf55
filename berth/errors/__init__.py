"""Error handling framework for berth.

This module provides:
- Rich error types with context and suggestions
- The error taxonomy of the command pipeline (validation, duplicate
  registration, config parsing, execution)
"""

from .base import BerthError, ErrorContext
from .types import (
    BYPASS_INSTRUCTION,
    SANITIZE_MODE_ENV,
    CLIError,
    ConfigParseError,
    DuplicateCommandError,
    ExecutionError,
    PluginError,
    UnboundPlaceholderError,
    ValidationError,
)

__all__ = [
    # Base classes
    "BerthError",
    "ErrorContext",
    # Specific error types
    "ValidationError",
    "UnboundPlaceholderError",
    "DuplicateCommandError",
    "ConfigParseError",
    "ExecutionError",
    "PluginError",
    "CLIError",
    # Constants
    "BYPASS_INSTRUCTION",
    "SANITIZE_MODE_ENV",
]
