"""Main CLI entry point for reforge."""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from reforge import __version__
from reforge.commands.init import init_cmd
from reforge.core.errors import ReforgeError, log_securely
from reforge.settings import Settings

err_console = Console(stderr=True)

_LOGGING_CONFIGURED = False


def _configure_logging() -> None:
    """Send reforge debug logs to stderr through Rich."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return
    logger = logging.getLogger("reforge")
    logger.setLevel(logging.DEBUG)
    logger.addHandler(RichHandler(console=err_console, show_path=False, rich_tracebacks=True))
    _LOGGING_CONFIGURED = True


def handle_error(error: ReforgeError, settings: Settings) -> None:
    """Report ``error`` and exit with its exit code."""
    if settings.debug:
        _configure_logging()
        log_securely(error)

    err_console.print(f"[bold red]Error:[/] {escape(str(error))}")

    if error.is_retryable():
        err_console.print(
            "\n[yellow]This error may be temporary. "
            "You can try running the command again.[/]"
        )

    sys.exit(error.exit_code())


class ReforgeGroup(click.Group):
    """Click group that routes every ReforgeError through handle_error."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except ReforgeError as e:
            handle_error(e, ctx.obj or Settings.from_env())


@click.group(cls=ReforgeGroup)
@click.version_option(version=__version__, prog_name="reforge")
@click.pass_context
def main(ctx: click.Context):
    """reforge - Configure source control for AI-driven development.

    Deploys prompt templates for GitHub Copilot or Claude Code so you can
    follow a specification-driven workflow: you write specifications and
    review, the agent writes the code.

    \b
    Quick Start:
      reforge init --agent claude     Initialize for Claude Code
      reforge init --agent copilot    Initialize for GitHub Copilot

    \b
    Environment:
      REFORGE_DEBUG=1                 Log error details to stderr
    """
    settings = Settings.from_env()
    ctx.obj = settings
    if settings.debug:
        _configure_logging()


main.add_command(init_cmd, name="init")


if __name__ == "__main__":
    main()
