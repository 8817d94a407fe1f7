"""CLI module for promrw."""

from promrw.cli.main import app, main_cli

__all__ = ["app", "main_cli"]
