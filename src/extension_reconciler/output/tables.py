"""Rich table builders for each command."""

from __future__ import annotations

import yaml
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from extension_reconciler.models.release import ReleaseInfo
from extension_reconciler.output.themes import styled_status


def release_info_panel(name: str, namespace: str, info: ReleaseInfo) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Release", name)
    table.add_row("Namespace", namespace)
    table.add_row("Status", styled_status(info.status))
    table.add_row("Revision", str(info.revision))
    table.add_row("Chart", f"{info.chart_name}-{info.version}")
    return Panel(table, title=f"[bold]Release: {name}[/bold]", border_style="blue")


def values_panel(values: dict) -> Panel:
    text = yaml.dump(values, default_flow_style=False) if values else "(no user-supplied values)"
    syntax = Syntax(text, "yaml", theme="monokai", line_numbers=False)
    return Panel(syntax, title="[bold]User-Supplied Values[/bold]", border_style="green")


def metadata_table(metadata: dict[str, str], title: str) -> Table:
    table = Table(title=title, expand=False)
    table.add_column("Annotation", style="cyan")
    table.add_column("Value", style="bold")
    for key, value in sorted(metadata.items()):
        table.add_row(key, value)
    return table


def crd_table(results: list[tuple[str, bool]]) -> Table:
    table = Table(title="Required CRDs", expand=False)
    table.add_column("CRD", style="cyan")
    table.add_column("Present", no_wrap=True)
    for name, present in results:
        table.add_row(name, "[green]yes[/green]" if present else "[red]no[/red]")
    return table
