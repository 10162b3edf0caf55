"""Validate, expand, and execute config-defined commands."""

from typing import TYPE_CHECKING, Optional, Sequence

from loguru import logger

from .executor import ShellExecutor
from .sanitizer import CommandSanitizer

if TYPE_CHECKING:
    from berth.config.schemas import CommandDefinition


class CommandPipeline:
    """Binds one sanitizer to one executor.

    The sanitizer is an explicit dependency so that every command built from
    the same pipeline shares the run's sanitizer configuration, and tests can
    construct pipelines side by side with different modes.
    """

    def __init__(
        self,
        sanitizer: CommandSanitizer,
        executor: Optional[ShellExecutor] = None,
    ):
        self.sanitizer = sanitizer
        self.executor = executor or ShellExecutor()

    def prepare(self, template: str, args: Sequence[str] = ()) -> str:
        """Run template, argument and expansion checks; return the final command."""
        return self.sanitizer.check(template, list(args))

    def execute(self, definition: "CommandDefinition", args: Sequence[str] = ()) -> int:
        """Prepare and run a command definition.

        Raises:
            ValidationError: If any stage rejects the command; nothing runs
            ExecutionError: If the child shell exits non-zero
        """
        final = self.prepare(definition.command, args)
        logger.debug(f"Running {definition.name} ({definition.origin.label}): {final}")
        return self.executor.run(
            final,
            env=definition.env,
            interactive=definition.interactive,
        )
