"""Discovery of plugin-bundled command sets.

Two kinds of plugin contribute commands:

* plugins installed into a ``.berth/plugins`` directory, which ship their
  default commands as a ``commands.yml`` file next to the plugin;
* Python packages exposing a ``berth.plugins`` entry point.
"""

import importlib.metadata
import inspect
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from loguru import logger

from berth.config.loader import ConfigurationLoader
from berth.config.schemas import CommandDefinition, Tier, parse_commands
from berth.errors import BerthError, ConfigParseError, PluginError

from .base import CommandPlugin, PluginMetadata

ENTRY_POINT_GROUP = "berth.plugins"
PLUGIN_DIR = Path(".berth") / "plugins"
COMMANDS_FILE = "commands.yml"
YAML_SUFFIXES = (".yml", ".yaml")


def plugin_directories(
    cwd: Optional[Union[str, Path]] = None,
    home: Optional[Union[str, Path]] = None,
) -> List[Path]:
    """Existing plugin directories, in lookup order.

    ``~/.berth/plugins`` comes first, then the working directory's, then each
    ancestor's until the home directory or a ``.git`` project root.
    """
    home_dir = Path(home).expanduser().resolve() if home else Path.home().resolve()
    current = Path(cwd).expanduser().resolve() if cwd else Path.cwd().resolve()

    candidates = [home_dir / PLUGIN_DIR, current / PLUGIN_DIR]
    while (
        current != home_dir
        and not (current / ".git").exists()
        and current.parent != current
        and current.parent != home_dir
    ):
        current = current.parent
        candidates.append(current / PLUGIN_DIR)

    directories: List[Path] = []
    for candidate in candidates:
        if candidate.is_dir() and candidate not in directories:
            directories.append(candidate)
    return directories


def commands_file_for(plugin_path: Path) -> Optional[Path]:
    """Locate the command file shipped with a plugin.

    A plugin directory carries ``commands.yml`` inside it. A plugin file looks
    for ``<name>.commands.yml`` beside it, then for a plain ``commands.yml``.
    """
    if plugin_path.is_dir():
        candidate = plugin_path / COMMANDS_FILE
        return candidate if candidate.is_file() else None

    named = plugin_path.with_name(f"{plugin_path.stem}.{COMMANDS_FILE}")
    if named.is_file():
        return named
    shared = plugin_path.with_name(COMMANDS_FILE)
    return shared if shared.is_file() else None


def iter_plugin_command_files(directory: Path) -> Iterator[Tuple[str, Path]]:
    """Yield ``(plugin name, command file)`` for every plugin in ``directory``."""
    seen: List[Path] = []
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith(".") or entry.suffix in YAML_SUFFIXES:
            continue
        commands_file = commands_file_for(entry)
        if commands_file is None or commands_file in seen:
            continue
        seen.append(commands_file)
        yield entry.stem, commands_file


class PluginCommandLoader:
    """Collects the command sets of every discoverable plugin."""

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        home: Optional[Union[str, Path]] = None,
        use_entry_points: bool = True,
        entry_point_group: str = ENTRY_POINT_GROUP,
    ):
        """Initialize plugin loader.

        Args:
            cwd: Working directory the ancestor walk starts from
            home: Home directory override
            use_entry_points: Also consult installed packages
            entry_point_group: Entry point group to read
        """
        self.cwd = cwd
        self.home = home
        self.use_entry_points = use_entry_points
        self.entry_point_group = entry_point_group
        self.errors: List[BerthError] = []
        self.plugins: Dict[str, PluginMetadata] = {}
        self.plugin_commands: Dict[str, List[str]] = {}

    def _record(self, metadata: PluginMetadata, commands: Dict[str, CommandDefinition]) -> None:
        self.plugins[metadata.name] = metadata
        self.plugin_commands[metadata.name] = sorted(commands)

    def load_directory_commands(self) -> List[Dict[str, CommandDefinition]]:
        """Command sets from plugin directories, in lookup order."""
        command_sets = []
        for directory in plugin_directories(self.cwd, self.home):
            logger.debug(f"Scanning plugin directory {directory}")
            for plugin, path in iter_plugin_command_files(directory):
                try:
                    commands = ConfigurationLoader.load_commands(path, tier=Tier.PLUGIN)
                except ConfigParseError as e:
                    logger.warning(f"Skipping commands of plugin {plugin}: {e.message}")
                    self.errors.append(e)
                    continue
                self._record(PluginMetadata(name=plugin, description=str(path)), commands)
                command_sets.append(commands)
        return command_sets

    def _instantiate(self, name: str, target: Any) -> CommandPlugin:
        if inspect.isclass(target) and issubclass(target, CommandPlugin):
            return target()
        if isinstance(target, CommandPlugin):
            return target
        if callable(target):
            plugin = target()
            if isinstance(plugin, CommandPlugin):
                return plugin
        raise PluginError.load_failed(name, f"{target!r} is not a CommandPlugin")

    def load_entry_point_commands(self) -> List[Dict[str, CommandDefinition]]:
        """Command sets from installed packages."""
        command_sets = []
        for entry_point in importlib.metadata.entry_points(group=self.entry_point_group):
            try:
                plugin = self._instantiate(entry_point.name, entry_point.load())
                raw = plugin.get_commands() or {}
                if not isinstance(raw, dict):
                    raise PluginError.load_failed(entry_point.name, "get_commands() must return a mapping")
                commands = parse_commands(raw, tier=Tier.PLUGIN)
            except BerthError as e:
                logger.warning(f"Skipping plugin {entry_point.name}: {e.message}")
                self.errors.append(e)
                continue
            except Exception as e:
                error = PluginError.load_failed(entry_point.name, str(e))
                logger.warning(f"Skipping plugin {entry_point.name}: {e}")
                self.errors.append(error)
                continue

            logger.debug(f"Loaded plugin from entry point: {entry_point.name}")
            metadata = plugin.get_metadata()
            if metadata.name == CommandPlugin.name:
                metadata = metadata.model_copy(update={"name": entry_point.name})
            self._record(metadata, commands)
            command_sets.append(commands)
        return command_sets

    def load_commands(self) -> Dict[str, CommandDefinition]:
        """Flatten every plugin's command set; the first plugin to define a name wins."""
        self.errors = []
        self.plugins = {}
        self.plugin_commands = {}
        command_sets = self.load_directory_commands()
        if self.use_entry_points:
            command_sets.extend(self.load_entry_point_commands())

        merged: Dict[str, CommandDefinition] = {}
        for commands in command_sets:
            for name, definition in commands.items():
                if name in merged:
                    logger.debug(f"Plugin command {name} already provided, keeping the first")
                    continue
                merged[name] = definition
        return merged
