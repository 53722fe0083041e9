"""Console output for the vault-sync CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormatter:
    """Formats messages, summaries and JSON documents for the terminal.

    Informational messages are suppressed in quiet mode. Warnings and errors
    always go to stderr. In JSON mode informational output also moves to
    stderr so stdout carries nothing but the JSON document.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON on stdout
            quiet: Suppress non-essential output
            console: Console for regular output (defaults to stdout)
            err_console: Console for warnings and errors (defaults to stderr)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.err_console = err_console or Console(stderr=True, highlight=False)
        if console is not None:
            self.console = console
        elif json_output:
            self.console = self.err_console
        else:
            self.console = Console(highlight=False)

    def print(self, message: str = "") -> None:
        if not self.quiet:
            self.console.print(escape(message))

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(escape(message))

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error:[/red] {escape(message)}")

    def print_summary(self, title: str, rows: list[tuple[str, Any]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            rows: (label, value) pairs
        """
        if self.quiet:
            return
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for label, value in rows:
            table.add_row(escape(label), escape(str(value)))
        self.console.print(table)

    def output_json(self, data: Any) -> None:
        """Write a JSON document to stdout."""
        print(json.dumps(data, indent=2, default=str))
