"""Base classes for berth plugins.

Installed packages extend berth by shipping a default command set. A plugin
only contributes command definitions; how a plugin's own binaries are
launched is up to the plugin.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class PluginMetadata(BaseModel):
    """Metadata for a plugin."""

    name: str
    version: str = "1.0.0"
    description: Optional[str] = None
    author: Optional[str] = None
    tags: List[str] = []


class CommandPlugin:
    """Base class for plugins that contribute commands.

    Subclasses override ``get_commands`` to return a raw ``commands:``
    mapping, in the same shape as a configuration file.
    """

    #: Default metadata; subclasses may override ``get_metadata`` instead.
    name: str = "plugin"
    version: str = "1.0.0"
    description: Optional[str] = None

    def get_metadata(self) -> PluginMetadata:
        """Return plugin metadata."""
        return PluginMetadata(
            name=self.name,
            version=self.version,
            description=self.description,
        )

    def get_commands(self) -> Dict[str, Any]:
        """Get the command set provided by this plugin.

        Returns:
            Mapping of command name to a command string or record
        """
        return {}
