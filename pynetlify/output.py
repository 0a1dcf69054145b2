"""Console output helpers for the CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Formats CLI output as rich text or JSON."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress informational messages
            console: Console for regular output
            err_console: Console for warnings and errors
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a message unconditionally (unless in JSON mode)."""
        if not self.json_output:
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if not self.quiet and not self.json_output:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if not self.quiet and not self.json_output:
            self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        """Print a warning to stderr."""
        if not self.quiet:
            self.err_console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        """Print an error to stderr (never suppressed)."""
        self.err_console.print(f"Error: {message}", style="bold red", markup=False)

    def progress_message(self, message: str) -> None:
        """Print a transient progress line."""
        if not self.quiet and not self.json_output:
            self.console.print(message, style="dim", markup=False)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of key/value pairs."""
        if self.quiet or self.json_output:
            return
        self.console.print()
        self.console.print(title, style="bold", markup=False)
        width = max((len(label) for label, _ in items), default=0)
        for label, value in items:
            self.console.print(f"  {label.ljust(width)}  {value}", markup=False)

    def output_json(self, data: Any) -> None:
        """Write data as JSON to stdout."""
        self.console.print_json(json.dumps(data, default=str))

    def output_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str],
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Render rows as a table."""
        if self.json_output:
            self.output_json(rows)
            return
        headers = headers or {}
        table = Table(show_header=True, header_style="bold")
        for column in columns:
            table.add_column(headers.get(column, column))
        for row in rows:
            table.add_row(*(str(row.get(column, "")) for column in columns))
        self.console.print(table)
