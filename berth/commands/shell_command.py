"""Commands backed by a shell template from a configuration source."""

from typing import Sequence

from berth.config.schemas import CommandDefinition
from berth.shell.pipeline import CommandPipeline

from .base import Command


class ShellCommand(Command):
    """Runs a ``CommandDefinition`` through the validation pipeline."""

    passthrough = True

    def __init__(self, definition: CommandDefinition, pipeline: CommandPipeline):
        self.definition = definition
        self.pipeline = pipeline
        self.name = definition.name
        self.help = definition.summary
        self.category = definition.category
        self.aliases = definition.aliases

    def run(self, args: Sequence[str]) -> int:
        return self.pipeline.execute(self.definition, list(args))


def shell_command_factory(pipeline: CommandPipeline):
    """Definition factory binding every shell command to ``pipeline``."""

    def for_definition(definition: CommandDefinition):
        return lambda: ShellCommand(definition, pipeline)

    return for_definition
