"""Decorators for CLI commands."""

import functools
import os
from typing import Callable

import typer
from loguru import logger

from berth.errors import BerthError, ExecutionError

from .console import print_error
from .logging import VERBOSE_ENV


def _verbose() -> bool:
    return os.environ.get(VERBOSE_ENV, "0").lower() in ("1", "true", "yes")


def handle_errors(func: Callable) -> Callable:
    """Decorator to turn errors into error panels and exit codes.

    A failing child command exits with the child's status. Other berth errors
    exit with 1 (or the error's own ``exit_code``); Ctrl-C exits with 130.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except KeyboardInterrupt:
            print_error("Operation cancelled by user", title="Cancelled")
            raise typer.Exit(130)  # Standard SIGINT exit code
        except ExecutionError as e:
            logger.debug(f"{e.error_code}: exit status {e.exit_code}")
            if e.cause is not None:
                print_error(e.format_for_cli(verbose=_verbose()), title="ExecutionError", markup=True)
            raise typer.Exit(e.exit_code)
        except BerthError as e:
            print_error(e.format_for_cli(verbose=_verbose()), title=type(e).__name__, markup=True)
            raise typer.Exit(getattr(e, "exit_code", 1))
        except Exception as e:
            logger.exception("Unexpected error")
            print_error(
                f"Unexpected error: {type(e).__name__}: {str(e)}\n"
                f"Run with --verbose for full traceback",
                title="Error",
            )
            raise typer.Exit(1)

    return wrapper
