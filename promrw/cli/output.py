"""Output formatting utilities for CLI."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

console = Console()
console_err = Console(stderr=True)


def print_success(message: str) -> None:
    """Print success message with checkmark."""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print error message with X mark."""
    console_err.print(f"[red]✗[/red] {escape(message)}")


def print_info(message: str) -> None:
    """Print info message with info symbol."""
    console.print(f"[blue]ℹ[/blue] {escape(message)}")


def print_panel(content: str, title: str | None = None, border_style: str = "cyan") -> None:
    """Print content in a bordered panel.

    Args:
        content: Content to display
        title: Optional panel title
        border_style: Border color style
    """
    panel = Panel(content, title=title, border_style=border_style)
    console.print(panel)
