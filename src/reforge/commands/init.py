"""reforge init - Initialize agent configuration in a project directory."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from reforge import __version__
from reforge.core.config import Agent, ProjectConfig, validate_project_name
from reforge.core.errors import (
    ReforgeError,
    UserCancelledError,
    ValidationError,
    with_context,
)
from reforge.file_ops import (
    CONFIG_FILE_NAME,
    canonicalize_path,
    ensure_directory_exists,
    ensure_overwrite_allowed,
    get_config_path,
    write_config_replacing,
)
from reforge.templates import deploy_templates

console = Console()

DEFAULT_AGENT = Agent.COPILOT


def _validate_output_directory(ctx, param, value) -> Path:
    """Click callback: canonicalize --output-directory."""
    try:
        return canonicalize_path(value)
    except ReforgeError as e:
        raise click.BadParameter(e.message) from e


@click.command()
@click.option(
    "--agent",
    "-a",
    type=click.Choice(Agent.all_names(), case_sensitive=False),
    default=None,
    help="AI agent to configure (prompted for when omitted)",
)
@click.option(
    "--output-directory",
    "-o",
    default=".",
    show_default=True,
    callback=_validate_output_directory,
    help="Directory to write the configuration into",
)
@click.option(
    "--project-name",
    "-p",
    default=None,
    help="Project name stored in the configuration (max 200 characters)",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite an existing configuration without asking",
)
def init_cmd(agent: Optional[str], output_directory: Path, project_name: Optional[str], force: bool):
    """Initialize a reforge project with agent configuration.

    Writes .reforge.json plus the CLAUDE.md and README.md templates for
    the selected agent into the output directory.

    \b
    Examples:
      reforge init --agent claude
      reforge init -a copilot -o ./my-project -p my-project
      reforge init --agent claude --force
    """
    console.print(Panel.fit(
        "[bold blue]reforge init[/] - Initializing Reforge project",
        border_style="blue"
    ))
    console.print(f"  [dim]Target: {escape(str(output_directory))}[/]")

    _validate_args(project_name)

    config_path = get_config_path(output_directory)
    ensure_overwrite_allowed(config_path, force=force, interactive=_is_interactive())

    selected = _determine_agent(agent)
    console.print(f"[blue]ℹ[/] Selected agent: {selected}")

    # Built and validated before anything touches the disk
    config = _create_project_config(selected, project_name)

    ensure_directory_exists(output_directory)

    try:
        write_config_replacing(config, config_path)
    except ReforgeError as e:
        raise with_context(e, "write configuration", f"could not save {config_path}") from e

    console.print("[green]✓[/] Successfully created Reforge configuration")
    console.print(f"  [dim]{escape(str(config_path))}[/]")

    deployed = deploy_templates(selected, output_directory)
    for path in deployed:
        console.print(f"[green]✓[/] Deployed {escape(path.name)}")

    _print_next_steps(selected)


def _is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _validate_args(project_name: Optional[str]) -> None:
    if project_name is None:
        return
    try:
        validate_project_name(project_name)
    except ValidationError as e:
        raise ValidationError(
            e.detail.replace("project_name", "Project name"),
            hint="Pass a non-empty --project-name of at most 200 characters.",
        ) from e


def _determine_agent(agent: Optional[str]) -> Agent:
    """Agent from the flag, an interactive prompt, or the default."""
    if agent:
        return Agent.parse(agent)

    if not _is_interactive():
        console.print(f"[blue]ℹ[/] No agent specified, defaulting to {DEFAULT_AGENT}")
        return DEFAULT_AGENT

    console.print("\n[bold]Available agents:[/]")
    for candidate in Agent.all():
        console.print(f"  [cyan]{candidate}[/]  {candidate.description}")

    try:
        choice = click.prompt(
            "Select an AI agent",
            type=click.Choice(Agent.all_names(), case_sensitive=False),
            default=DEFAULT_AGENT.value,
        )
    except click.Abort:
        raise UserCancelledError("Agent selection cancelled") from None
    return Agent.parse(choice)


def _create_project_config(agent: Agent, project_name: Optional[str]) -> ProjectConfig:
    if project_name is not None:
        config = ProjectConfig.with_project_name(agent, project_name)
    else:
        config = ProjectConfig.new(agent)

    config.add_package(agent.default_package())
    config.set_metadata("initialized_by", "reforge-cli")
    config.set_metadata("version", __version__)

    config.validate()
    return config


def _print_next_steps(agent: Agent) -> None:
    console.print("\n[bold]Next steps:[/]")
    console.print(f"  1. Review the generated [cyan]{CONFIG_FILE_NAME}[/] configuration")
    console.print("  2. Customize CLAUDE.md for your project")
    console.print(f"  3. Start using {agent.display_name} with the configured templates")

    if agent is Agent.COPILOT:
        console.print("  4. Make sure GitHub Copilot is enabled in your editor")
    else:
        console.print("  4. Make sure Claude Code is installed and configured")
