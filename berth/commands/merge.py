"""Merging command sources into the registry.

Sources are processed in tier order (core, project-local, plugin, global).
The first tier to claim a name keeps it; later claims are skipped without
surfacing an error. An alias that is already taken is dropped on its own and
the command still registers under its name. Two policies are explicit and
configurable:

* ``skip_protected`` - a non-core definition that targets a protected name
  is dropped quietly instead of being reported as a conflict;
* ``best_effort`` - a source that fails to parse is recorded and skipped
  instead of aborting the whole merge.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from loguru import logger

from berth.config.discovery import (
    discover_project_configs,
    global_config_path,
    load_global_commands,
    load_project_commands,
)
from berth.config.schemas import CommandDefinition, Tier, parse_command
from berth.errors import BerthError, ConfigParseError, DuplicateCommandError
from berth.plugins.loader import PluginCommandLoader

from .registry import CommandFactory, Metadata, Registry, is_protected

DefinitionFactory = Callable[[CommandDefinition], CommandFactory]


class CommandSource(ABC):
    """A tier of command definitions."""

    tier: Tier = Tier.PROJECT_LOCAL

    def __init__(self):
        self.errors: List[BerthError] = []

    @property
    def label(self) -> str:
        return self.tier.label

    @abstractmethod
    def load(self) -> Dict[str, CommandDefinition]:
        """Load this source's definitions.

        Parse failures are recorded in ``errors`` rather than raised.
        """
        pass


class ProjectSource(CommandSource):
    """Configuration files from the working directory up to the project root."""

    tier = Tier.PROJECT_LOCAL

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        home: Optional[Union[str, Path]] = None,
    ):
        super().__init__()
        self.cwd = cwd
        self.home = home
        self.paths: List[Path] = []

    def load(self) -> Dict[str, CommandDefinition]:
        self.errors = []
        self.paths = discover_project_configs(self.cwd or Path.cwd(), self.home)
        return load_project_commands(self.paths, self.errors)


class PluginSource(CommandSource):
    """Default command sets shipped by plugins."""

    tier = Tier.PLUGIN

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        home: Optional[Union[str, Path]] = None,
        use_entry_points: bool = True,
    ):
        super().__init__()
        self.loader = PluginCommandLoader(cwd=cwd, home=home, use_entry_points=use_entry_points)

    def load(self) -> Dict[str, CommandDefinition]:
        commands = self.loader.load_commands()
        self.errors = list(self.loader.errors)
        return commands


class GlobalSource(CommandSource):
    """The user-wide configuration file."""

    tier = Tier.GLOBAL

    def __init__(self, home: Optional[Union[str, Path]] = None):
        super().__init__()
        self.home = home

    @property
    def path(self) -> Path:
        return global_config_path(self.home)

    def load(self) -> Dict[str, CommandDefinition]:
        self.errors = []
        return load_global_commands(self.home, self.errors)


class StaticSource(CommandSource):
    """In-memory definitions, either parsed or as raw config records."""

    def __init__(self, commands: Mapping[str, Any], tier: Tier = Tier.PLUGIN):
        super().__init__()
        self.tier = tier
        self.commands = dict(commands)

    def load(self) -> Dict[str, CommandDefinition]:
        self.errors = []
        definitions: Dict[str, CommandDefinition] = {}
        for name, value in self.commands.items():
            if isinstance(value, CommandDefinition):
                definitions[name] = value
                continue
            try:
                definitions[name] = parse_command(name, value, tier=self.tier)
            except ConfigParseError as e:
                self.errors.append(e)
                return {}
        return definitions


@dataclass(frozen=True)
class MergePolicy:
    """How the resolver treats protected names and broken sources."""

    skip_protected: bool = True
    best_effort: bool = True


@dataclass
class MergeReport:
    """Outcome of a merge, for diagnostics."""

    registered: List[str] = field(default_factory=list)
    skipped_protected: List[str] = field(default_factory=list)
    skipped_conflicts: List[str] = field(default_factory=list)
    #: ``(command, alias)`` pairs whose alias was already taken
    skipped_aliases: List[Tuple[str, str]] = field(default_factory=list)
    errors: List[BerthError] = field(default_factory=list)


class MergeResolver:
    """Feeds command sources into a registry under a ``MergePolicy``."""

    def __init__(
        self,
        registry: Registry,
        factory: DefinitionFactory,
        policy: Optional[MergePolicy] = None,
    ):
        """Initialize resolver.

        Args:
            registry: Registry receiving the commands
            factory: Turns a definition into a zero-argument command factory
            policy: Merge policy, lenient by default
        """
        self.registry = registry
        self.factory = factory
        self.policy = policy or MergePolicy()

    def _load(self, source: CommandSource, report: MergeReport) -> Dict[str, CommandDefinition]:
        definitions = source.load()
        if source.errors:
            if not self.policy.best_effort:
                raise source.errors[0]
            report.errors.extend(source.errors)
        return definitions

    def _free_aliases(
        self,
        name: str,
        aliases: Tuple[str, ...],
        source: CommandSource,
        report: MergeReport,
    ) -> Tuple[str, ...]:
        """Drop aliases an earlier registration already owns; the command keeps its name."""
        free = []
        for alias in aliases:
            if alias != name and alias in self.registry:
                logger.debug(f"Dropping alias {alias} of {source.label} command {name}: already taken")
                report.skipped_aliases.append((name, alias))
                continue
            free.append(alias)
        return tuple(free)

    def merge(self, sources: Iterable[CommandSource]) -> MergeReport:
        """Register every source's definitions, highest priority tier first.

        Raises:
            ConfigParseError: A source failed to parse and ``best_effort`` is off
            DuplicateCommandError: A protected name was targeted and
                ``skip_protected`` is off
        """
        report = MergeReport()
        for source in sorted(sources, key=lambda s: s.tier):
            definitions = self._load(source, report)
            logger.debug(f"Merging {len(definitions)} command(s) from the {source.label} tier")

            for name, definition in definitions.items():
                if source.tier is not Tier.CORE and is_protected(name):
                    if not self.policy.skip_protected:
                        raise DuplicateCommandError(
                            f"duplicate command: {name} is a protected built-in command",
                            name=name,
                            tier=source.label,
                            existing_tier=Tier.CORE.label,
                            error_code="DUPLICATE_PROTECTED_COMMAND",
                        )
                    logger.debug(f"Skipping {source.label} command {name}: protected name")
                    report.skipped_protected.append(name)
                    continue

                if name in self.registry:
                    logger.debug(f"Skipping {source.label} command {name}: name already taken")
                    report.skipped_conflicts.append(name)
                    continue

                metadata = Metadata(
                    name=name,
                    category=definition.category,
                    description=definition.summary,
                    aliases=self._free_aliases(name, definition.aliases, source, report),
                )
                try:
                    registered = self.registry.register(
                        name, self.factory(definition), metadata, tier=source.tier
                    )
                except DuplicateCommandError as e:
                    logger.debug(f"Skipping {source.label} command {name}: {e.message}")
                    report.skipped_conflicts.append(name)
                    continue

                if registered:
                    report.registered.append(name)
                else:
                    report.skipped_protected.append(name)
        return report
