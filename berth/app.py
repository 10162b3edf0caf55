"""Main CLI application for berth.

The command tree is not static: every command comes from the registry that
``CommandBuilder`` assembles from the core tier and the discovered
configuration sources.
"""

import sys
from typing import List, Optional, Sequence, Tuple

import typer
from rich.markup import escape
from typer.core import TyperCommand

from berth._version import __version__
from berth.commands import Command, CommandBuilder
from berth.config.settings import load_settings
from berth.errors import ConfigParseError
from berth.utils.console import get_console, print_error
from berth.utils.decorators import handle_errors
from berth.utils.logging import setup_logging

PASSTHROUGH_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}


class PassthroughCommand(TyperCommand):
    """Hands every argument to the command untouched.

    Regular option parsing would swallow a literal ``--``; shell commands
    need it forwarded as-is.
    """

    def parse_args(self, ctx: typer.Context, args: List[str]) -> List[str]:
        ctx.args = list(args)
        return []


def version_callback(value: bool):
    if value:
        get_console().print(f"[bold cyan]berth[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


def _attach(app: typer.Typer, command: Command, name: str, hidden: bool) -> None:
    """Register one command (or alias) on the typer app."""

    @handle_errors
    def run_command(ctx: typer.Context) -> None:
        code = command.run(list(ctx.args))
        if code:
            raise typer.Exit(code)

    app.command(
        name=name,
        help=escape(command.help),
        hidden=hidden,
        rich_help_panel=command.category.title(),
        context_settings=PASSTHROUGH_SETTINGS,
        add_help_option=not command.passthrough,
        cls=PassthroughCommand if command.passthrough else TyperCommand,
    )(run_command)


def create_app(builder: CommandBuilder) -> typer.Typer:
    """Build the typer application from a populated builder."""
    app = typer.Typer(
        name="berth",
        help="berth: project commands for Docker Compose development environments",
        no_args_is_help=True,
        rich_markup_mode="rich",
        add_completion=False,
        pretty_exceptions_enable=False,
    )

    @app.callback()
    def callback(
        version: bool = typer.Option(
            None,
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version",
        ),
        verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output"),
    ):
        """berth: project commands for Docker Compose development environments."""
        if verbose or quiet:
            setup_logging(verbose=verbose, quiet=quiet)

    for command in builder.commands():
        for name in command.invocation_names:
            # aliases stay out of the help listing
            _attach(app, command, name, hidden=command.hidden or name != command.name)

    return app


def leading_flags(argv: Sequence[str]) -> Tuple[bool, bool]:
    """Verbosity flags given before the command name."""
    verbose = quiet = False
    for arg in argv:
        if not arg.startswith("-"):
            break
        verbose = verbose or arg in ("--verbose", "-V")
        quiet = quiet or arg in ("--quiet", "-q")
    return verbose, quiet


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings = load_settings()
    except ConfigParseError as e:
        print_error(e.format_for_cli(), title="Configuration error", markup=True)
        raise SystemExit(1)
    verbose, quiet = leading_flags(argv)
    setup_logging(verbose=settings.verbose or verbose, quiet=settings.quiet or quiet)

    builder = CommandBuilder(settings)
    builder.build()
    app = create_app(builder)
    app(args=argv, prog_name="berth")


if __name__ == "__main__":
    main()
