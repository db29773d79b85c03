"""extrec validate <file> - Check which install source a manifest declares."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console

from extension_reconciler.core.errors import SpecValidationError
from extension_reconciler.core.validation import release_spec_for, validate_spec
from extension_reconciler.models import InstallSource
from extension_reconciler.models.extension import ExtensionRequest

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def validate(
    manifest: Path = typer.Argument(help="Path to an InstallAIExtension YAML manifest", exists=True, dir_okay=False),
) -> None:
    """Validate an InstallAIExtension manifest."""
    try:
        doc = yaml.safe_load(manifest.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        typer.echo(f"Invalid YAML: {e}", err=True)
        raise typer.Exit(code=2)

    request = ExtensionRequest.from_dict(doc)
    try:
        source = validate_spec(request)
        if source is InstallSource.HELM:
            spec = release_spec_for(request)
            console.print(f"chart: [magenta]{spec.chart_ref}[/magenta] {spec.version} -> {spec.namespace}")
    except SpecValidationError as e:
        console.print(f"[red]invalid[/red]: {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]valid[/green]: {request.name} installs from [bold]{source.value}[/bold]")
