"""Configuration management CLI commands."""

import json
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from promrw.cli.output import print_error, print_info, print_panel
from promrw.config import Settings, get_settings
from promrw.logging_config import get_logger

app = typer.Typer(help="Configuration management")
console = Console()
logger = get_logger(__name__)

SECTIONS = ("remote_write", "logging")
REDACTED = "***REDACTED***"


@app.command("show")
def show_config(
    section: Optional[str] = typer.Option(
        None,
        "--section",
        "-s",
        help="Show specific section: remote_write, logging",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, yaml, json",
    ),
) -> None:
    """
    Show current configuration.

    Header values are redacted since they usually carry credentials.
    """
    if section and section not in SECTIONS:
        print_error(f"Unknown section: {section}")
        print_info(f"Available sections: {', '.join(SECTIONS)}")
        raise typer.Exit(1)

    settings = get_settings()
    config_dict = _settings_to_dict(settings)
    if section:
        config_dict = {section: config_dict[section]}

    if format == "yaml":
        config_yaml = yaml.dump(config_dict, default_flow_style=False, sort_keys=False)
        console.print(Syntax(config_yaml, "yaml", theme="monokai", line_numbers=True))
    elif format == "json":
        console.print(
            Syntax(json.dumps(config_dict, indent=2), "json", theme="monokai", line_numbers=True)
        )
    elif format == "table":
        console.print()
        print_panel("promrw Configuration", border_style="cyan")
        console.print()
        for name, values in config_dict.items():
            console.print(_section_table(name, values))
            console.print()
    else:
        print_error(f"Invalid output format: {format}")
        raise typer.Exit(1)


def _section_table(name: str, values: dict) -> Table:
    """Build a two-column table for one configuration section."""
    title = name.replace("_", " ").title() + " Settings"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in values.items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items()) or "None"
        table.add_row(key, "Not configured" if value is None else str(value))

    return table


def _settings_to_dict(settings: Settings) -> dict:
    """Convert settings object to a nested dictionary mirroring the YAML file."""
    return {
        "remote_write": {
            "url": settings.remote_write_url,
            "user_agent": settings.remote_write_user_agent,
            "timeout_seconds": settings.remote_write_timeout_seconds,
            "compression": settings.remote_write_compression,
            "labels": dict(settings.remote_write_labels),
            "headers": {name: REDACTED for name in settings.remote_write_headers},
        },
        "logging": {
            "level": settings.log_level,
            "format": settings.log_format,
        },
    }
