"""berth: project-aware command runner for Docker Compose development environments.

Projects, plugins and users declare shell-backed commands in YAML; berth
merges them into one command namespace and validates every invocation
against shell injection before running it.
"""

from ._version import __version__

__all__ = ["__version__"]
