"""Configuration for berth: settings, schemas and config file discovery."""

from .discovery import (
    GLOBAL_CONFIG_NAME,
    PROJECT_CONFIG_NAMES,
    discover_project_configs,
    find_config_in,
    global_config_path,
    load_global_commands,
    load_project_commands,
)
from .loader import ConfigurationLoader
from .schemas import (
    DEFAULT_CATEGORY,
    CommandDefinition,
    CommandSpec,
    ConfigFile,
    Tier,
    parse_command,
    parse_commands,
)
from .settings import BerthSettings, load_settings

__all__ = [
    "BerthSettings",
    "CommandDefinition",
    "CommandSpec",
    "ConfigFile",
    "ConfigurationLoader",
    "DEFAULT_CATEGORY",
    "GLOBAL_CONFIG_NAME",
    "PROJECT_CONFIG_NAMES",
    "Tier",
    "discover_project_configs",
    "find_config_in",
    "global_config_path",
    "load_global_commands",
    "load_project_commands",
    "load_settings",
    "parse_command",
    "parse_commands",
]
