"""Plugin-bundled command sets for berth."""

from .base import CommandPlugin, PluginMetadata
from .loader import (
    COMMANDS_FILE,
    ENTRY_POINT_GROUP,
    PluginCommandLoader,
    commands_file_for,
    iter_plugin_command_files,
    plugin_directories,
)

__all__ = [
    "COMMANDS_FILE",
    "ENTRY_POINT_GROUP",
    "CommandPlugin",
    "PluginCommandLoader",
    "PluginMetadata",
    "commands_file_for",
    "iter_plugin_command_files",
    "plugin_directories",
]
