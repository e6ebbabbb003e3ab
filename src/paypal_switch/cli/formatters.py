"""Output formatters for CLI commands."""

import json
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from paypal_switch.cli.config import OutputFormat

console = Console()
error_console = Console(stderr=True)


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested dicts into dotted keys for table rows."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


def format_output(
    data: BaseModel | dict[str, Any],
    output_format: OutputFormat,
    *,
    title: str | None = None,
) -> None:
    """Format and print a single record as a field/value table or JSON."""
    if isinstance(data, BaseModel):
        record = data.model_dump(mode="json", exclude_none=True)
    else:
        record = data

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(record, default=str))
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in _flatten(record).items():
        table.add_row(key, str(value))
    console.print(table)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]i[/blue] {message}")
