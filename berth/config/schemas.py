"""Configuration schemas for berth.

Command records from every source are validated with pydantic and then frozen
into ``CommandDefinition`` objects tagged with the tier they came from.
"""

import re
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from berth.errors import ConfigParseError

DEFAULT_CATEGORY = "custom"


class Tier(IntEnum):
    """Command sources, in priority order (lower value wins)."""

    CORE = 0
    PROJECT_LOCAL = 1
    PLUGIN = 2
    GLOBAL = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class CommandDefinition:
    """A shell-backed command declared by a configuration source."""

    name: str
    command: str
    description: str = ""
    help: str = ""
    aliases: Tuple[str, ...] = ()
    env: Dict[str, str] = field(default_factory=dict)
    category: str = DEFAULT_CATEGORY
    origin: Tier = Tier.PROJECT_LOCAL
    interactive: bool = True
    source: Optional[Path] = None

    @property
    def summary(self) -> str:
        """One-line help text."""
        return self.description or self.help or f"Run: {self.command}"


class CommandSpec(BaseModel):
    """A single entry of a ``commands:`` section."""

    model_config = ConfigDict(extra="ignore")

    cmd: str = Field(..., description="Shell command template")
    description: Optional[str] = Field(None, description="Short description")
    help: Optional[str] = Field(None, description="Longer help text")
    alias: Optional[str] = Field(None, description="Alternate command name")
    category: Optional[str] = Field(None, description="Help panel category")
    env: Dict[str, str] = Field(default_factory=dict, description="Environment overrides")
    interactive: bool = Field(True, description="Attach stdin to the command")

    @field_validator("cmd")
    @classmethod
    def validate_cmd(cls, v: str) -> str:
        """Reject empty templates."""
        if not v.strip():
            raise ValueError("command cannot be empty")
        return v

    @field_validator("alias")
    @classmethod
    def validate_alias(cls, v: Optional[str]) -> Optional[str]:
        """Normalize blank aliases to None."""
        if v is None or not v.strip():
            return None
        if any(ch.isspace() for ch in v.strip()):
            raise ValueError(f"alias must be a single word: {v!r}")
        return v.strip()

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: Any) -> Dict[str, str]:
        """Accept scalar values and stringify them."""
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            raise ValueError("env must be a mapping of variable names to values")
        return {str(key): "" if value is None else str(value) for key, value in v.items()}


class ConfigFile(BaseModel):
    """Top-level layout of a berth configuration file.

    Only the ``commands:`` section is consumed; any other top-level keys
    belong to other parts of the tool and are ignored here.
    """

    model_config = ConfigDict(extra="ignore")

    commands: Dict[str, Any] = Field(default_factory=dict, description="Command records")

    @field_validator("commands", mode="before")
    @classmethod
    def validate_commands(cls, v: Any) -> Dict[str, Any]:
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            raise ValueError("'commands' must be a mapping of names to commands")
        return dict(v)


def _references_itself(template: str, name: str) -> bool:
    return re.search(rf"\bberth\s+{re.escape(name)}(?![\w-])", template) is not None


def _error_reason(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    where = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", str(error))
    return f"{where}: {message}" if where else message


def parse_command(
    name: Any,
    value: Any,
    tier: Tier = Tier.PROJECT_LOCAL,
    path: Optional[Path] = None,
) -> CommandDefinition:
    """Parse one ``commands:`` entry.

    A plain string is shorthand for ``{"cmd": value}``.

    Raises:
        ConfigParseError: If the record is invalid
    """
    if not isinstance(name, str) or not name.strip() or any(ch.isspace() for ch in name):
        raise ConfigParseError.invalid_command(str(name), "command name must be a single word", path)

    if isinstance(value, str):
        value = {"cmd": value}
    elif not isinstance(value, Mapping):
        raise ConfigParseError.invalid_command(name, "command must have 'cmd' field", path)
    elif "cmd" not in value:
        raise ConfigParseError.invalid_command(name, "command must have 'cmd' field", path)

    try:
        spec = CommandSpec.model_validate(dict(value))
    except PydanticValidationError as e:
        raise ConfigParseError.invalid_command(name, _error_reason(e), path) from e

    for reference in filter(None, (name, spec.alias)):
        if _references_itself(spec.cmd, reference):
            raise ConfigParseError.invalid_command(
                name, "command may contain circular reference", path
            )

    return CommandDefinition(
        name=name,
        command=spec.cmd,
        description=spec.description or "",
        help=spec.help or "",
        aliases=(spec.alias,) if spec.alias and spec.alias != name else (),
        env=spec.env,
        category=spec.category or DEFAULT_CATEGORY,
        origin=tier,
        interactive=spec.interactive,
        source=path,
    )


def parse_commands(
    raw: Mapping[str, Any],
    tier: Tier = Tier.PROJECT_LOCAL,
    path: Optional[Path] = None,
) -> Dict[str, CommandDefinition]:
    """Parse a raw ``commands:`` mapping.

    Any invalid entry fails the whole mapping.

    Raises:
        ConfigParseError: On the first invalid entry
    """
    return {name: parse_command(name, value, tier, path) for name, value in raw.items()}
