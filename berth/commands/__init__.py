"""Command registry, merge resolution and built-in commands."""

from .base import Command
from .builder import CommandBuilder
from .core import CORE_COMMANDS, ConfigCommand, ContextCommand, HelpCommand, PluginsCommand, VersionCommand
from .merge import (
    CommandSource,
    GlobalSource,
    MergePolicy,
    MergeReport,
    MergeResolver,
    PluginSource,
    ProjectSource,
    StaticSource,
)
from .registry import PROTECTED_COMMANDS, Category, Metadata, Registry, is_protected
from .shell_command import ShellCommand, shell_command_factory

__all__ = [
    "CORE_COMMANDS",
    "PROTECTED_COMMANDS",
    "Category",
    "Command",
    "CommandBuilder",
    "CommandSource",
    "ConfigCommand",
    "ContextCommand",
    "GlobalSource",
    "HelpCommand",
    "MergePolicy",
    "MergeReport",
    "MergeResolver",
    "Metadata",
    "PluginSource",
    "PluginsCommand",
    "ProjectSource",
    "Registry",
    "ShellCommand",
    "StaticSource",
    "VersionCommand",
    "is_protected",
    "shell_command_factory",
]
