"""Configuration loader for berth.

Reads YAML configuration files and turns their ``commands:`` section into
command definitions.
"""

from pathlib import Path
from typing import Any, Dict

import yaml
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from berth.errors import ConfigParseError

from .schemas import CommandDefinition, ConfigFile, Tier, parse_commands


class ConfigurationLoader:
    """Loads command-bearing configuration files."""

    @staticmethod
    def load_yaml_config(path: Path) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Configuration dictionary (empty for an empty file)

        Raises:
            ConfigParseError: If file cannot be read or is not a YAML mapping
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigParseError.unreadable(path, str(e)) from e

        if not isinstance(config, dict):
            raise ConfigParseError.unreadable(path, "top level must be a mapping")

        logger.debug(f"Loaded config from {path}")
        return config

    @staticmethod
    def parse_config(data: Dict[str, Any], path: Path) -> ConfigFile:
        """Validate the top-level layout of a loaded file."""
        try:
            return ConfigFile.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigParseError.unreadable(path, e.errors()[0].get("msg", str(e))) from e

    @classmethod
    def load_commands(
        cls,
        path: Path,
        tier: Tier = Tier.PROJECT_LOCAL,
    ) -> Dict[str, CommandDefinition]:
        """Load and parse the ``commands:`` section of a file.

        Raises:
            ConfigParseError: If the file or any of its commands is invalid
        """
        config = cls.parse_config(cls.load_yaml_config(path), path)
        commands = parse_commands(config.commands, tier=tier, path=path)
        logger.debug(f"Parsed {len(commands)} command(s) from {path}")
        return commands
