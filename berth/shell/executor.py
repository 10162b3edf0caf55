"""Shell execution of validated commands."""

import os
import subprocess
from typing import Dict, Mapping, Optional

from loguru import logger

from berth.errors import ExecutionError


class ShellExecutor:
    """Runs a final command string through a system shell.

    Going through ``sh -c`` keeps pipes, redirects and control structures
    working for templates that are allowed to use them. Standard streams and
    the environment are inherited from the parent process.
    """

    def __init__(self, shell: str = "sh"):
        """Initialize executor.

        Args:
            shell: Shell binary used as ``<shell> -c <command>``
        """
        self.shell = shell

    def build_env(self, overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Parent environment with per-command overrides applied."""
        env = dict(os.environ)
        if overrides:
            env.update({str(key): str(value) for key, value in overrides.items()})
        return env

    def run(
        self,
        command: str,
        env: Optional[Mapping[str, str]] = None,
        interactive: bool = True,
    ) -> int:
        """Execute ``command`` and wait for it.

        Args:
            command: Final, validated command string
            env: Environment overrides
            interactive: Attach stdin; otherwise stdin is /dev/null

        Returns:
            The exit code (always 0, failures raise)

        Raises:
            ExecutionError: On a non-zero exit or a missing shell
        """
        logger.debug(f"Executing via {self.shell}: {command}")
        try:
            result = subprocess.run(
                [self.shell, "-c", command],
                env=self.build_env(env),
                stdin=None if interactive else subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise ExecutionError(
                f"shell not found: {self.shell}",
                command=command,
                exit_code=127,
                cause=e,
                error_code="EXECUTION_SHELL_NOT_FOUND",
            ) from e

        if result.returncode != 0:
            raise ExecutionError.non_zero_exit(command, result.returncode).with_context(shell=self.shell)
        return result.returncode
