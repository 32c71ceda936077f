"""Consolidated display utilities for CLI commands."""
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typing import Dict, List, Any, Tuple

console = Console()


def success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓ {escape(message)}[/green]")


def warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]⚠️  {escape(message)}[/yellow]")


def error(message: str) -> None:
    """Print error message."""
    console.print(f"[red]❌ {escape(message)}[/red]")


def info(message: str) -> None:
    """Print info message."""
    console.print(message)


def info_dict(data: Dict[str, Any], indent: str = "  ") -> None:
    """Print a dictionary as indented key-value pairs."""
    for key, value in data.items():
        console.print(f"{indent}{key}: {value}")


def blocks_table(rows: List[Tuple[str, int]], title: str) -> None:
    """Print stored keys with their sizes."""
    table = Table(title=title)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Size", justify="right")
    for key, size in rows:
        table.add_row(key, format_size(size))
    console.print(table)


def format_size(num_bytes: int) -> str:
    """Format a byte count for humans."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{int(size)} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
