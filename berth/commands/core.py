"""Built-in commands.

These are registered from the core tier before any configuration source is
merged, so no project, plugin or global definition can replace them.
"""

import difflib
from typing import TYPE_CHECKING, Dict, List, Sequence

from rich.markup import escape

from berth._version import __version__
from berth.errors import CLIError
from berth.utils.console import create_table, get_console, print_info, print_success, print_warning

from .base import Command
from .merge import GlobalSource, PluginSource, ProjectSource
from .registry import Category, Metadata, category_value
from .shell_command import ShellCommand

if TYPE_CHECKING:
    from .builder import CommandBuilder


class CoreCommand(Command):
    """A built-in command with access to the builder that assembled the CLI."""

    def __init__(self, builder: "CommandBuilder"):
        self.builder = builder

    @property
    def registry(self):
        return self.builder.registry


class HelpCommand(CoreCommand):
    """Lists commands by category, or describes one command."""

    name = "help"
    help = "Show available commands, or details of one command"

    def run(self, args: Sequence[str]) -> int:
        if args:
            return self.describe(args[0])

        console = get_console()
        console.print("[bold cyan]berth[/bold cyan] - development environment commands\n")
        for category, names in self.grouped().items():
            table = create_table(category.title(), ["Command", "Aliases", "Description"])
            for name in names:
                metadata = self.registry.get_metadata(name)
                table.add_row(name, ", ".join(metadata.aliases), escape(metadata.description))
            console.print(table)
        console.print("\nRun [bold]berth help <command>[/bold] for details on a command.")
        return 0

    def grouped(self) -> Dict[str, List[str]]:
        """Visible command names keyed by category, in registration order."""
        groups: Dict[str, List[str]] = {}
        for name in self.registry.names():
            metadata = self.registry.get_metadata(name)
            if metadata.hidden:
                continue
            groups.setdefault(category_value(metadata.category), []).append(name)
        return groups

    def describe(self, name: str) -> int:
        metadata = self.registry.get_metadata(name)
        if metadata is None:
            candidates = self.registry.names() + [
                alias for known in self.registry.names() for alias in self.registry.get_aliases(known)
            ]
            raise CLIError.invalid_command(name, difflib.get_close_matches(name, candidates, n=3))

        console = get_console()
        console.print(f"[bold cyan]{metadata.name}[/bold cyan]: {escape(metadata.description)}")
        console.print(f"  Category: {escape(category_value(metadata.category))}")
        console.print(f"  Source: {self.registry.get_tier(name).label}")
        if metadata.aliases:
            console.print(f"  Aliases: {', '.join(metadata.aliases)}")

        command = self.registry.get(name)()
        if isinstance(command, ShellCommand):
            console.print(f"  Command: {escape(command.definition.command)}")
            if command.definition.source:
                console.print(f"  Defined in: {command.definition.source}")
        return 0


class VersionCommand(CoreCommand):
    name = "version"
    help = "Show version information"

    def run(self, args: Sequence[str]) -> int:
        get_console().print(f"[bold cyan]berth[/bold cyan] version [green]{__version__}[/green]")
        return 0


class ConfigCommand(CoreCommand):
    """Shows effective settings and the configuration files in use."""

    name = "config"
    help = "Show sanitizer settings and discovered configuration files (--check to validate)"

    def run(self, args: Sequence[str]) -> int:
        if "--check" in args:
            report = self.builder.check()
            print_success(f"All configuration files are valid ({len(report.registered)} command(s))")
            return 0

        settings = self.builder.settings
        config = self.builder.sanitizer_config
        table = create_table("Settings", ["Setting", "Value"])
        table.add_row("sanitize mode", config.mode.value)
        table.add_row("allow pipes", str(config.allow_pipes))
        table.add_row("allow redirects", str(config.allow_redirects))
        table.add_row("shell", settings.shell)
        get_console().print(table)

        files = create_table("Configuration files", ["Tier", "Path", "Status"])
        for source in self.builder.sources:
            if isinstance(source, ProjectSource):
                for path in source.paths:
                    files.add_row(source.label, str(path), "loaded")
            elif isinstance(source, GlobalSource):
                files.add_row(source.label, str(source.path), "loaded" if source.path.is_file() else "missing")
        get_console().print(files)
        return 0


class ContextCommand(CoreCommand):
    """Shows how the command namespace was assembled."""

    name = "context"
    help = "Show where each command came from"

    def run(self, args: Sequence[str]) -> int:
        console = get_console()
        table = create_table("Commands", ["Command", "Tier", "Category", "Aliases"])
        for name in self.registry.names():
            metadata = self.registry.get_metadata(name)
            table.add_row(
                name,
                self.registry.get_tier(name).label,
                escape(category_value(metadata.category)),
                ", ".join(metadata.aliases),
            )
        console.print(table)

        report = self.builder.report
        if report is None:
            return 0
        if report.skipped_protected:
            console.print(f"Ignored (protected): {', '.join(report.skipped_protected)}")
        if report.skipped_conflicts:
            console.print(f"Ignored (already defined): {', '.join(report.skipped_conflicts)}")
        if report.skipped_aliases:
            dropped = ", ".join(f"{alias} ({name})" for name, alias in report.skipped_aliases)
            console.print(f"Ignored aliases (already taken): {dropped}")
        for error in report.errors:
            print_warning(error.message, title="Skipped source")
        return 0


class PluginsCommand(CoreCommand):
    """Lists plugins that contributed command sets."""

    name = "plugins"
    help = "List plugins and the commands they provide"

    def run(self, args: Sequence[str]) -> int:
        loader = None
        for source in self.builder.sources:
            if isinstance(source, PluginSource):
                loader = source.loader

        console = get_console()
        if loader is None or not loader.plugins:
            print_info("No plugins found.", title="Plugins")
            return 0

        wanted = args[0] if args else None
        if wanted and wanted not in loader.plugins:
            raise CLIError.invalid_command(wanted, difflib.get_close_matches(wanted, list(loader.plugins)))

        table = create_table("Plugins", ["Plugin", "Version", "Commands", "Description"])
        for name, metadata in loader.plugins.items():
            if wanted and name != wanted:
                continue
            table.add_row(
                name,
                metadata.version,
                ", ".join(loader.plugin_commands.get(name, [])),
                escape(metadata.description or ""),
            )
        console.print(table)
        return 0


CORE_COMMANDS = [
    (HelpCommand, Metadata(name="help", category=Category.HELP, description=HelpCommand.help)),
    (VersionCommand, Metadata(name="version", category=Category.CORE, description=VersionCommand.help)),
    (
        ConfigCommand,
        Metadata(name="config", category=Category.DEBUG, description=ConfigCommand.help, hidden=True),
    ),
    (
        ContextCommand,
        Metadata(name="context", category=Category.DEBUG, description=ContextCommand.help, hidden=True),
    ),
    (
        PluginsCommand,
        Metadata(
            name="plugins",
            category=Category.PLUGIN,
            description=PluginsCommand.help,
            aliases=("plugin",),
        ),
    ),
]
