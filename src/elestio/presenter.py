"""
Output rendering for the CLI.

Results are printed either as rich tables or, with ``--json``, as JSON on
stdout. Status messages go to stderr so JSON output stays parseable.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

Column = tuple[str, str]  # (key, label)


class Presenter:
    """Renders results as tables or JSON."""

    def __init__(
        self,
        json_output: bool = False,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.json_output = json_output
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    # Messages

    def info(self, message: str) -> None:
        self.err_console.print(f"[cyan]i[/cyan] {escape(message)}")

    def success(self, message: str) -> None:
        self.err_console.print(f"[green]✓[/green] {escape(message)}")

    def warn(self, message: str) -> None:
        self.err_console.print(f"[yellow]![/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)

    # Data

    def json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data, default=str))

    def table(
        self,
        rows: Sequence[dict[str, Any]],
        columns: Sequence[Column],
        title: str | None = None,
        empty: str = "Nothing to show",
    ) -> None:
        if self.json_output:
            self.json(list(rows))
            return
        if not rows:
            self.info(empty)
            return

        table = Table(title=title, show_header=True, header_style="bold")
        for _, label in columns:
            table.add_column(label)
        for row in rows:
            table.add_row(*(_cell(row.get(key)) for key, _ in columns))
        self.console.print(table)

    def record(self, data: dict[str, Any], fields: Sequence[Column], title: str | None = None) -> None:
        """Key/value view of a single record."""
        if self.json_output:
            self.json(data)
            return
        if title:
            self.console.print(f"\n[bold]{title}[/bold]")
        for key, label in fields:
            self.console.print(f"  {label + ':':<18} {_cell(data.get(key))}")
        self.console.print()

    def service(self, service: dict[str, Any]) -> None:
        self.record(
            service,
            [
                ("displayName", "Name"),
                ("vmID", "vmID"),
                ("templateName", "Software"),
                ("status", "Status"),
                ("deploymentStatus", "Deployment"),
                ("serverType", "Size"),
                ("provider", "Provider"),
                ("datacenter", "Region"),
                ("ipv4", "IPv4"),
                ("cname", "CNAME"),
            ],
            title=service.get("displayName") or str(service.get("vmID", "")),
        )


def _cell(value: Any) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


__all__ = ["Presenter", "Column"]
