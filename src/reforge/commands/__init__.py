"""CLI commands for reforge."""
