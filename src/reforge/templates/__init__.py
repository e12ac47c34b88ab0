"""Templates module for reforge scaffolding."""

from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from reforge.core.config import Agent
from reforge.core.errors import (
    DirectoryCreationError,
    ReforgeError,
    ValidationError,
    from_os_error,
    with_context,
)
from reforge.templates import claude, copilot

console = Console()

_TEMPLATES: Dict[Agent, Dict[str, str]] = {
    Agent.COPILOT: copilot.TEMPLATE_FILES,
    Agent.CLAUDE: claude.TEMPLATE_FILES,
}


def list_template_files(agent: Agent) -> List[str]:
    """Names of the files deployed for ``agent``."""
    return list(_TEMPLATES[agent])


def get_template_content(agent: Agent, file_name: str) -> str:
    return _TEMPLATES[agent][file_name]


def deploy_templates(agent: Agent, target_dir: Path) -> List[Path]:
    """Write every template for ``agent`` into ``target_dir``.

    Each file is written independently: a failure is reported and the
    remaining files are still attempted. Files already written are kept.

    Returns:
        Paths of the files written.

    Raises:
        ValidationError: If ``target_dir`` exists but is not a directory
        ContextError: Wrapping the first per-file failure
    """
    target_dir = Path(target_dir)

    if not target_dir.exists():
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(target_dir, e) from e

    if not target_dir.is_dir():
        raise ValidationError(
            f"Target path '{target_dir}' exists but is not a directory"
        )

    deployed = []
    first_error: Optional[ReforgeError] = None
    first_name = ""

    for name, content in _TEMPLATES[agent].items():
        try:
            deployed.append(deploy_template_file(content, target_dir, name))
        except ReforgeError as e:
            console.print(f"[red]✗[/] {escape(name)}: {escape(e.message)}")
            if first_error is None:
                first_error, first_name = e, name

    if first_error is not None:
        raise with_context(
            first_error,
            "deploy templates",
            f"{first_name} could not be written to {target_dir}",
        ) from first_error

    return deployed


def deploy_template_file(content: str, target_dir: Path, file_name: str) -> Path:
    """Write one template file, overwriting any existing copy."""
    file_path = Path(target_dir) / file_name

    # Templates are always replaced; only the config file asks first.
    if file_path.exists():
        console.print(f"[yellow]⚠[/] Overwriting existing file: {escape(str(file_path))}")

    try:
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise from_os_error(e, file_path) from e

    return file_path
