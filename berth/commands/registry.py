"""Command registry.

Maps canonical command names to factories and presentation metadata, keeps
an alias table disjoint from the canonical names, and enforces the protected
built-in name set.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from loguru import logger

from berth.config.schemas import Tier
from berth.errors import DuplicateCommandError

from .base import Command

CommandFactory = Callable[[], Command]

PROTECTED_COMMANDS: FrozenSet[str] = frozenset(
    {
        "help",
        "setup",
        "plugins",
        "plugin",
        "self-update",
        "update",
        "upgrade",
        "version",
        "completion",
        "global",
        "config",
        "context",
        "shell-test",
        "docker-test",
        "container-test",
    }
)


def is_protected(name: str) -> bool:
    """Check whether ``name`` is a built-in name no other tier may claim."""
    return name in PROTECTED_COMMANDS


class Category(str, Enum):
    """Help panel categories."""

    CORE = "core"
    DOCKER = "docker"
    TESTING = "testing"
    DATABASE = "database"
    DEVELOPER = "developer"
    SETUP = "setup"
    PLUGIN = "plugin"
    GLOBAL = "global"
    DEBUG = "debug"
    HELP = "help"
    CUSTOM = "custom"


def category_value(category: Union[Category, str]) -> str:
    return category.value if isinstance(category, Category) else str(category)


@dataclass(frozen=True)
class Metadata:
    """Presentation data attached to a registered command."""

    name: str
    category: Union[Category, str] = Category.CORE
    description: str = ""
    aliases: Tuple[str, ...] = ()
    hidden: bool = False


class Registry:
    """Name to factory store with alias resolution."""

    def __init__(self):
        self._factories: Dict[str, CommandFactory] = {}
        self._metadata: Dict[str, Metadata] = {}
        self._tiers: Dict[str, Tier] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        name: str,
        factory: CommandFactory,
        metadata: Optional[Metadata] = None,
        tier: Tier = Tier.CORE,
    ) -> bool:
        """Register a command factory.

        Args:
            name: Canonical command name
            factory: Zero-argument callable returning a ``Command``
            metadata: Presentation metadata
            tier: Source tier of the command

        Returns:
            True if registered, False if ignored because a non-core tier
            targeted a protected name

        Raises:
            DuplicateCommandError: If the name or an alias is already taken
        """
        if tier is not Tier.CORE and is_protected(name):
            logger.debug(f"Ignoring {tier.label} command {name}: protected name")
            return False

        if name in self._factories:
            raise DuplicateCommandError.command(name, tier.label, self._tiers[name].label)
        if name in self._aliases:
            owner = self._aliases[name]
            raise DuplicateCommandError(
                f"duplicate command: {name} is already an alias of {owner}",
                name=name,
                existing=owner,
                tier=tier.label,
                existing_tier=self._tiers[owner].label,
                error_code="DUPLICATE_COMMAND",
            )

        metadata = metadata or Metadata(name=name)
        aliases: List[str] = []
        for alias in metadata.aliases:
            if alias == name or alias in aliases:
                continue
            if tier is not Tier.CORE and is_protected(alias):
                logger.debug(f"Dropping protected alias {alias} of {tier.label} command {name}")
                continue
            if alias in self._factories:
                raise DuplicateCommandError.alias(alias, alias, tier.label)
            if alias in self._aliases:
                raise DuplicateCommandError.alias(alias, self._aliases[alias], tier.label)
            aliases.append(alias)

        self._factories[name] = factory
        self._metadata[name] = replace(metadata, name=name, aliases=tuple(aliases))
        self._tiers[name] = tier
        for alias in aliases:
            self._aliases[alias] = name

        logger.debug(f"Registered {tier.label} command: {name}")
        return True

    def resolve_alias(self, alias: str) -> Optional[str]:
        """Canonical name for ``alias``, or None if it is not an alias."""
        return self._aliases.get(alias)

    def _canonical(self, name: str) -> Optional[str]:
        canonical = self._aliases.get(name)
        if canonical is not None:
            return canonical
        return name if name in self._factories else None

    def get(self, name: str) -> Optional[CommandFactory]:
        """Factory for a command name or alias."""
        canonical = self._canonical(name)
        return self._factories[canonical] if canonical else None

    def get_metadata(self, name: str) -> Optional[Metadata]:
        """Metadata for a command name or alias."""
        canonical = self._canonical(name)
        return self._metadata[canonical] if canonical else None

    def get_tier(self, name: str) -> Optional[Tier]:
        """Tier a command name or alias was registered from."""
        canonical = self._canonical(name)
        return self._tiers[canonical] if canonical else None

    def get_aliases(self, name: str) -> List[str]:
        metadata = self._metadata.get(name)
        return list(metadata.aliases) if metadata else []

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    def names(self) -> List[str]:
        """Canonical names in registration order."""
        return list(self._factories)

    def get_by_category(self, category: Union[Category, str]) -> List[str]:
        """Canonical names of the commands in ``category``."""
        wanted = category_value(category)
        return [
            name
            for name, metadata in self._metadata.items()
            if category_value(metadata.category) == wanted
        ]

    def _create(self, name: str) -> Command:
        command = self._factories[name]()
        metadata = self._metadata[name]
        if not command.name:
            command.name = name
        command.aliases = metadata.aliases
        command.hidden = metadata.hidden
        command.category = category_value(metadata.category)
        if not command.help and metadata.description:
            command.help = metadata.description
        return command

    def create_all(self) -> List[Command]:
        """Instantiate every registered command, in registration order."""
        return [self._create(name) for name in self._factories]

    def create_by_category(self, category: Union[Category, str]) -> List[Command]:
        return [self._create(name) for name in self.get_by_category(category)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._canonical(name) is not None

    def __len__(self) -> int:
        return len(self._factories)
