"""Base error classes with rich context for berth."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel, Field
from rich.markup import escape


class ErrorContext(BaseModel):
    """Rich context information for errors."""

    timestamp: datetime = Field(default_factory=datetime.now)
    user_message: Optional[str] = None
    technical_details: Dict[str, Any] = Field(default_factory=dict)
    suggestions: List[str] = Field(default_factory=list)
    related_errors: List[Dict[str, Any]] = Field(default_factory=list)

    def add_suggestion(self, suggestion: str) -> None:
        """Add a helpful suggestion for resolving the error."""
        self.suggestions.append(suggestion)

    def add_technical_detail(self, key: str, value: Any) -> None:
        """Add technical debugging information."""
        self.technical_details[key] = value

    def add_related_error(self, error: BaseException) -> None:
        """Add a related error for context."""
        self.related_errors.append({
            "type": type(error).__name__,
            "message": str(error),
        })


T = TypeVar("T", bound="BerthError")


class BerthError(Exception):
    """Base exception class for berth with rich context support."""

    def __init__(
        self,
        message: str,
        *,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        error_code: Optional[str] = None,
        recoverable: bool = True,
    ):
        """Initialize berth error with context.

        Args:
            message: Human-readable error message
            context: Rich error context
            cause: Original exception that caused this error
            error_code: Unique error code for programmatic handling
            recoverable: Whether this error can be recovered from
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.cause = cause
        self.error_code = error_code or self._generate_error_code()
        self.recoverable = recoverable

        self.context.user_message = message
        if cause:
            self.context.add_related_error(cause)

        self._log_error()

    def _generate_error_code(self) -> str:
        """Generate a unique error code based on error type."""
        class_name = self.__class__.__name__
        # Convert CamelCase to UPPER_SNAKE_CASE
        code = ""
        for i, char in enumerate(class_name):
            if i > 0 and char.isupper() and class_name[i-1].islower():
                code += "_"
            code += char.upper()
        return code.replace("_ERROR", "")

    def _log_error(self) -> None:
        """Record the error at debug level.

        Whether an error is user-facing is decided by whoever catches it:
        duplicate registrations and tolerated config files are dropped
        quietly, validation failures are rendered by the CLI.
        """
        logger.bind(
            error_code=self.error_code,
            recoverable=self.recoverable,
        ).debug(f"{self.error_code}: {self.message}")

    def with_context(self: T, **kwargs: Any) -> T:
        """Add context information to the error."""
        for key, value in kwargs.items():
            self.context.add_technical_detail(key, value)
        return self

    def with_suggestion(self: T, suggestion: str) -> T:
        """Add a suggestion for resolving the error."""
        self.context.add_suggestion(suggestion)
        return self

    def format_for_cli(self, verbose: bool = False) -> str:
        """Format error for CLI output."""
        lines = [
            f"[red]Error[/red]: {escape(self.message)}",
            f"[dim]Code: {self.error_code}[/dim]",
        ]

        if self.context.suggestions:
            lines.append("\n[yellow]Suggestions:[/yellow]")
            for suggestion in self.context.suggestions:
                lines.append(f"  • {escape(suggestion)}")

        if verbose and self.context.technical_details:
            lines.append("\n[dim]Technical Details:[/dim]")
            for key, value in self.context.technical_details.items():
                lines.append(f"  {key}: {escape(str(value))}")

        return "\n".join(lines)
