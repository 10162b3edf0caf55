"""Base class for commands produced by registry factories."""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple


class Command(ABC):
    """A runnable CLI command.

    Registry factories return instances of this class. Presentation
    attributes (``aliases``, ``hidden``, ``category``) are stamped onto the
    instance by ``Registry.create_all`` from the registered metadata.
    """

    name: str = ""
    help: str = ""
    category: str = "core"
    aliases: Tuple[str, ...] = ()
    hidden: bool = False
    #: Hand every token, ``--help`` included, to ``run`` unparsed.
    passthrough: bool = False

    @abstractmethod
    def run(self, args: Sequence[str]) -> int:
        """Execute the command.

        Args:
            args: Positional arguments from the command line

        Returns:
            Exit code
        """
        pass

    @property
    def invocation_names(self) -> List[str]:
        """Canonical name followed by aliases."""
        return [self.name, *self.aliases]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
