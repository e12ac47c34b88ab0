"""Shared test fixtures for reforge.

Provides:
- workspace: Temporary project directory
- config: Valid ProjectConfig with one package
- cli_runner: Click CliRunner
- run_init: Invoke `reforge init` against a directory
"""

import pytest
from click.testing import CliRunner

from reforge.cli import main
from reforge.core.config import Agent, Package, ProjectConfig


@pytest.fixture
def workspace(tmp_path):
    """Create an empty project directory.

    Returns a Path to the workspace root.
    """
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def config():
    """ProjectConfig for Claude with one package and a project name."""
    cfg = ProjectConfig.with_project_name(Agent.CLAUDE, "demo")
    cfg.add_package(Package("reforge-claude-templates", "1.0.0"))
    return cfg


@pytest.fixture
def cli_runner():
    """Click CliRunner for testing CLI commands."""
    return CliRunner()


@pytest.fixture
def run_init(cli_runner, monkeypatch):
    """Run `reforge init` with the given extra arguments.

    REFORGE_DEBUG is cleared so output does not depend on the caller's
    environment.
    """
    monkeypatch.delenv("REFORGE_DEBUG", raising=False)

    def _run(directory, *args):
        return cli_runner.invoke(
            main, ["init", "--output-directory", str(directory), *args]
        )

    return _run
