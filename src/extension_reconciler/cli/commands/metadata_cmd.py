"""extrec metadata <repo-url> <name> <version> - Resolve UIPlugin annotations."""

from __future__ import annotations

from typing import Optional

import typer

from extension_reconciler.cli.options import OutputOption, TimeoutOption
from extension_reconciler.core.errors import ExtensionReconcilerError
from extension_reconciler.core.index_cache import IndexCache
from extension_reconciler.core.metadata_resolver import resolve_extension_metadata
from extension_reconciler.output.formatters import output_metadata
from extension_reconciler.utils.deadline import deadline_after

app = typer.Typer()


def _parse_overrides(pairs: list[str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--meta")
        overrides[key] = value
    return overrides


@app.callback(invoke_without_command=True)
def metadata(
    repo_url: str = typer.Argument(help="Repository base URL serving index.yaml"),
    name: str = typer.Argument(help="Extension (chart) name"),
    version: str = typer.Argument(help="Exact chart version"),
    meta: Optional[list[str]] = typer.Option(None, "--meta", "-m", help="Override annotation, key=value"),
    output: str = OutputOption,
    timeout: float = TimeoutOption,
) -> None:
    """Resolve the catalog annotations a UIPlugin would be registered with."""
    overrides = _parse_overrides(meta or [])
    try:
        resolved = resolve_extension_metadata(
            IndexCache(), repo_url, name, version, overrides, deadline=deadline_after(timeout),
        )
    except ExtensionReconcilerError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    output_metadata(name, version, resolved, output)
