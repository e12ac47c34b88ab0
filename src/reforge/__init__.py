"""reforge - Configure a project for AI-driven development."""

__version__ = "0.1.0"
