"""Discovery of project-local and global configuration files."""

from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger

from berth.errors import ConfigParseError

from .loader import ConfigurationLoader
from .schemas import CommandDefinition, Tier

PROJECT_CONFIG_NAMES = (".berth.yml", ".berth.yaml")
GLOBAL_CONFIG_NAME = ".berth.yml"
PROJECT_ROOT_MARKER = ".git"


def _home(home: Optional[Union[str, Path]]) -> Path:
    return Path(home).expanduser().resolve() if home else Path.home().resolve()


def find_config_in(directory: Path) -> Optional[Path]:
    """Return the configuration file of one directory, if any.

    Candidate names are tried in sorted order, so ``.berth.yaml`` wins over
    ``.berth.yml`` when both exist.
    """
    for name in sorted(PROJECT_CONFIG_NAMES):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def discover_project_configs(
    start_dir: Union[str, Path],
    home: Optional[Union[str, Path]] = None,
) -> List[Path]:
    """Find configuration files from ``start_dir`` up to the project root.

    The walk stops at the filesystem root, at the home directory (which is
    never treated as a project directory) and after the first directory that
    contains ``.git``.

    Args:
        start_dir: Directory to start from, usually the working directory
        home: Home directory override

    Returns:
        Configuration paths, deepest (highest priority) first
    """
    home_dir = _home(home)
    current = Path(start_dir).expanduser().resolve()
    configs: List[Path] = []

    while current != current.parent and current != home_dir:
        config = find_config_in(current)
        if config is not None:
            logger.debug(f"Found project config: {config}")
            configs.append(config)

        if (current / PROJECT_ROOT_MARKER).exists():
            logger.debug(f"Reached project root: {current}")
            break
        current = current.parent

    return configs


def load_project_commands(
    paths: List[Path],
    errors: Optional[List[ConfigParseError]] = None,
) -> Dict[str, CommandDefinition]:
    """Flatten project configuration files into one command mapping.

    Files are applied from lowest to highest priority, so a definition in a
    deeper directory replaces one with the same name further up. Files that
    fail to load are logged, recorded in ``errors`` and skipped.

    Args:
        paths: Configuration paths, highest priority first
        errors: Optional list collecting tolerated parse errors

    Returns:
        Command name to definition
    """
    merged: Dict[str, CommandDefinition] = {}
    for path in reversed(paths):
        try:
            commands = ConfigurationLoader.load_commands(path, tier=Tier.PROJECT_LOCAL)
        except ConfigParseError as e:
            logger.warning(f"Skipping config {path}: {e.message}")
            if errors is not None:
                errors.append(e)
            continue

        for name, definition in commands.items():
            if name in merged:
                logger.debug(f"{path} overrides command {name} from {merged[name].source}")
            merged[name] = definition
    return merged


def global_config_path(home: Optional[Union[str, Path]] = None) -> Path:
    """Location of the user-wide configuration file."""
    return _home(home) / GLOBAL_CONFIG_NAME


def load_global_commands(
    home: Optional[Union[str, Path]] = None,
    errors: Optional[List[ConfigParseError]] = None,
) -> Dict[str, CommandDefinition]:
    """Load the ``commands:`` section of the global configuration file.

    A missing file yields no commands; an invalid one is logged, recorded in
    ``errors`` and yields no commands.
    """
    path = global_config_path(home)
    if not path.is_file():
        logger.debug(f"No global config at {path}")
        return {}

    try:
        return ConfigurationLoader.load_commands(path, tier=Tier.GLOBAL)
    except ConfigParseError as e:
        logger.warning(f"Skipping global config {path}: {e.message}")
        if errors is not None:
            errors.append(e)
        return {}
