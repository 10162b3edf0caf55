"""Specific error types for berth modules."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

from .base import BerthError

SANITIZE_MODE_ENV = "BERTH_SANITIZE_MODE"
BYPASS_INSTRUCTION = f"To disable sanitization (UNSAFE): export {SANITIZE_MODE_ENV}=disabled"


class ValidationError(BerthError):
    """A command template, argument or expansion was rejected by the sanitizer."""

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        category: str,
        fragment: str = "",
        target: Optional[str] = None,
        expanded: Optional[str] = None,
        **kwargs: Any,
    ):
        """Initialize validation error.

        Args:
            message: Human-readable description of the finding
            stage: Validation stage that raised (template, arguments, expanded)
            category: Pattern category label, e.g. "pipe operator"
            fragment: The offending fragment
            target: What was being inspected ("command", "argument 2", ...)
            expanded: Fully expanded command, for expanded-stage failures
        """
        lines = [message]
        if expanded is not None:
            lines.append(f"\nCommand after expansion: {expanded}")
        lines.append(f"\n{BYPASS_INSTRUCTION}")
        super().__init__("\n".join(lines), **kwargs)

        self.stage = stage
        self.category = category
        self.fragment = fragment
        self.target = target
        self.expanded = expanded

        self.context.add_technical_detail("stage", stage)
        self.context.add_technical_detail("category", category)
        self.context.add_technical_detail("fragment", fragment)
        if target:
            self.context.add_technical_detail("target", target)
        self.with_suggestion(BYPASS_INSTRUCTION)

    @classmethod
    def dangerous_pattern(
        cls,
        stage: str,
        category: str,
        fragment: str,
        target: str,
        description: str = "",
        expanded: Optional[str] = None,
    ) -> "ValidationError":
        """Create error for a cataloged dangerous pattern."""
        detail = f" ({description})" if description else ""
        return cls(
            f"{stage} validation failed: {category} detected in {target}: "
            f"{fragment!r}{detail}",
            stage=stage,
            category=category,
            fragment=fragment,
            target=target,
            expanded=expanded,
            error_code="VALIDATION_DANGEROUS_PATTERN",
        )


class UnboundPlaceholderError(ValidationError):
    """A positional placeholder had no matching argument."""

    CATEGORY = "unbound placeholder"

    def __init__(self, placeholder: str, template: str, arg_count: int, **kwargs: Any):
        """Initialize unbound placeholder error."""
        super().__init__(
            f"expanded validation failed: unbound placeholder {placeholder} "
            f"(template needs more than {arg_count} argument(s))",
            stage="expanded",
            category=self.CATEGORY,
            fragment=placeholder,
            target="command",
            error_code="VALIDATION_UNBOUND_PLACEHOLDER",
            **kwargs,
        )
        self.placeholder = placeholder
        self.template = template
        self.arg_count = arg_count


class DuplicateCommandError(BerthError):
    """A command name or alias collided with an existing registration."""

    def __init__(
        self,
        message: str,
        *,
        name: str,
        existing: Optional[str] = None,
        tier: Optional[str] = None,
        existing_tier: Optional[str] = None,
        **kwargs: Any,
    ):
        """Initialize duplicate command error."""
        super().__init__(message, **kwargs)
        self.name = name
        self.existing = existing
        self.tier = tier
        self.existing_tier = existing_tier

        self.context.add_technical_detail("name", name)
        if existing:
            self.context.add_technical_detail("existing", existing)
        if tier:
            self.context.add_technical_detail("tier", tier)
        if existing_tier:
            self.context.add_technical_detail("existing_tier", existing_tier)

    @classmethod
    def command(cls, name: str, tier: str, existing_tier: str) -> "DuplicateCommandError":
        """Create error for a canonical-name collision."""
        return cls(
            f"duplicate command: {name} already registered by the {existing_tier} tier",
            name=name,
            existing=name,
            tier=tier,
            existing_tier=existing_tier,
            error_code="DUPLICATE_COMMAND",
        )

    @classmethod
    def alias(cls, alias: str, owner: str, tier: str) -> "DuplicateCommandError":
        """Create error for an alias colliding with a command or another alias."""
        return cls(
            f"duplicate command: alias {alias} conflicts with command {owner}",
            name=alias,
            existing=owner,
            tier=tier,
            error_code="DUPLICATE_ALIAS",
        )


class ConfigParseError(BerthError):
    """A configuration source could not be read or parsed."""

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[Path] = None,
        field_path: Optional[str] = None,
        **kwargs: Any,
    ):
        """Initialize configuration parse error."""
        super().__init__(message, **kwargs)
        self.config_path = config_path
        self.field_path = field_path

        if config_path:
            self.context.add_technical_detail("config_path", str(config_path))
        if field_path:
            self.context.add_technical_detail("field_path", field_path)

    @classmethod
    def unreadable(cls, path: Path, reason: str) -> "ConfigParseError":
        """Create error for a file that could not be read or decoded."""
        error = cls(
            f"Failed to load config from {path}: {reason}",
            config_path=path,
            error_code="CONFIG_UNREADABLE",
        )
        error.with_suggestion(f"Check that {path} is valid YAML")
        return error

    @classmethod
    def invalid_command(
        cls,
        name: str,
        reason: str,
        path: Optional[Path] = None,
    ) -> "ConfigParseError":
        """Create error for an invalid command record."""
        where = f" in {path}" if path else ""
        error = cls(
            f"error parsing command {name}{where}: {reason}",
            config_path=path,
            field_path=f"commands.{name}",
            error_code="CONFIG_INVALID_COMMAND",
        )
        error.with_suggestion("Each command needs at least a non-empty 'cmd' field")
        return error


class ExecutionError(BerthError):
    """The spawned shell exited unsuccessfully."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        exit_code: int = 1,
        **kwargs: Any,
    ):
        """Initialize execution error."""
        super().__init__(message, **kwargs)
        self.command = command
        self.exit_code = exit_code

        if command:
            self.context.add_technical_detail("command", command)
        self.context.add_technical_detail("exit_code", exit_code)

    @classmethod
    def non_zero_exit(cls, command: str, exit_code: int) -> "ExecutionError":
        """Create error for a failing child process."""
        return cls(
            f"command exited with status {exit_code}",
            command=command,
            exit_code=exit_code,
            error_code="EXECUTION_FAILED",
        )


class PluginError(BerthError):
    """Plugin-related errors."""

    def __init__(
        self,
        message: str,
        *,
        plugin_name: Optional[str] = None,
        plugin_path: Optional[Path] = None,
        **kwargs: Any,
    ):
        """Initialize plugin error."""
        super().__init__(message, **kwargs)
        self.plugin_name = plugin_name

        if plugin_name:
            self.context.add_technical_detail("plugin_name", plugin_name)
        if plugin_path:
            self.context.add_technical_detail("plugin_path", str(plugin_path))

    @classmethod
    def load_failed(cls, plugin_name: str, reason: str) -> "PluginError":
        """Create error for plugin load failure."""
        error = cls(
            f"Failed to load plugin '{plugin_name}': {reason}",
            plugin_name=plugin_name,
            error_code="PLUGIN_LOAD_FAILED",
        )
        error.with_suggestion("Check the plugin's entry point and get_commands() return value")
        return error


class CLIError(BerthError):
    """CLI-specific errors."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        exit_code: int = 1,
        **kwargs: Any,
    ):
        """Initialize CLI error."""
        super().__init__(message, **kwargs)
        self.exit_code = exit_code

        if command:
            self.context.add_technical_detail("command", command)
        self.context.add_technical_detail("exit_code", exit_code)

    @classmethod
    def invalid_command(cls, command: str, similar: Optional[List[str]] = None) -> "CLIError":
        """Create error for invalid command."""
        error = cls(
            f"Unknown command: {command}",
            command=command,
            error_code="CLI_INVALID_COMMAND",
            exit_code=2,
        )

        if similar:
            error.with_suggestion(f"Did you mean: {', '.join(similar)}?")
        error.with_suggestion("Use 'berth help' to see available commands")

        return error
