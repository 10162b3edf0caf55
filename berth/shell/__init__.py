"""Command sanitization, placeholder expansion and shell execution."""

from .executor import ShellExecutor
from .expander import PLACEHOLDER_PATTERN, expand, find_placeholders, unbound_placeholders
from .patterns import (
    DANGEROUS_PATTERNS,
    PatternCategory,
    PatternMatch,
    count_patterns,
    find_dangerous_patterns,
    first_dangerous_pattern,
    is_safe,
)
from .pipeline import CommandPipeline
from .sanitizer import (
    CommandSanitizer,
    SanitizationMode,
    SanitizerConfig,
    ValidationStage,
    parse_sanitize_mode,
    warn_unknown_mode,
)

__all__ = [
    "DANGEROUS_PATTERNS",
    "PLACEHOLDER_PATTERN",
    "CommandPipeline",
    "CommandSanitizer",
    "PatternCategory",
    "PatternMatch",
    "SanitizationMode",
    "SanitizerConfig",
    "ShellExecutor",
    "ValidationStage",
    "count_patterns",
    "expand",
    "find_dangerous_patterns",
    "find_placeholders",
    "first_dangerous_pattern",
    "is_safe",
    "parse_sanitize_mode",
    "unbound_placeholders",
    "warn_unknown_mode",
]
