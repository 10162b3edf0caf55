"""Assembly of the command namespace for one CLI run."""

from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from berth.config.settings import BerthSettings, load_settings
from berth.shell.executor import ShellExecutor
from berth.shell.pipeline import CommandPipeline
from berth.shell.sanitizer import CommandSanitizer, SanitizerConfig

from .base import Command
from .core import CORE_COMMANDS
from .merge import CommandSource, GlobalSource, MergePolicy, MergeReport, MergeResolver, PluginSource, ProjectSource
from .registry import Registry
from .shell_command import shell_command_factory


class CommandBuilder:
    """Wires settings, sanitizer, executor, registry and sources together.

    The sanitizer configuration is computed once here and handed to every
    shell command through the shared pipeline.
    """

    def __init__(
        self,
        settings: Optional[BerthSettings] = None,
        cwd: Optional[Union[str, Path]] = None,
        executor: Optional[ShellExecutor] = None,
        sanitizer_config: Optional[SanitizerConfig] = None,
        sources: Optional[List[CommandSource]] = None,
        policy: Optional[MergePolicy] = None,
        use_entry_points: bool = True,
    ):
        """Initialize builder.

        Args:
            settings: Process settings, read from the environment by default
            cwd: Working directory for discovery, the process's by default
            executor: Shell executor, built from ``settings.shell`` by default
            sanitizer_config: Overrides the configuration derived from settings
            sources: Overrides the default project/plugin/global sources
            policy: Merge policy
            use_entry_points: Let installed packages contribute plugin commands
        """
        self.settings = settings or load_settings()
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.sanitizer_config = sanitizer_config or self.settings.sanitizer_config()
        self.sanitizer = CommandSanitizer(self.sanitizer_config)
        self.executor = executor or ShellExecutor(self.settings.shell)
        self.pipeline = CommandPipeline(self.sanitizer, self.executor)
        self.policy = policy or MergePolicy()
        self.use_entry_points = use_entry_points
        self.sources = sources if sources is not None else self.default_sources()
        self.registry = Registry()
        self.report: Optional[MergeReport] = None

    def default_sources(self) -> List[CommandSource]:
        home = self.settings.home
        return [
            ProjectSource(self.cwd, home),
            PluginSource(self.cwd, home, use_entry_points=self.use_entry_points),
            GlobalSource(home),
        ]

    def register_core(self, registry: Registry) -> None:
        for command_class, metadata in CORE_COMMANDS:
            registry.register(metadata.name, lambda cls=command_class: cls(self), metadata)

    def merge(self, registry: Registry, policy: MergePolicy) -> MergeReport:
        self.register_core(registry)
        resolver = MergeResolver(registry, shell_command_factory(self.pipeline), policy)
        return resolver.merge(self.sources)

    def build(self) -> Registry:
        """Populate the registry from the core tier and every source."""
        self.registry = Registry()
        self.report = self.merge(self.registry, self.policy)
        logger.debug(
            f"Registered {len(self.registry)} command(s), "
            f"{len(self.report.errors)} source error(s)"
        )
        return self.registry

    def check(self) -> MergeReport:
        """Re-run discovery with strict parsing.

        Raises:
            ConfigParseError: On the first invalid configuration source
        """
        return self.merge(Registry(), MergePolicy(skip_protected=True, best_effort=False))

    def commands(self) -> List[Command]:
        """Instantiate every registered command, building first if needed."""
        if self.report is None:
            self.build()
        return self.registry.create_all()
