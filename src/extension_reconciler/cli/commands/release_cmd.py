"""extrec release <name> - Show the latest revision of a release."""

from __future__ import annotations

from typing import Optional

import typer

from extension_reconciler.cli.options import ContextOption, NamespaceOption, OutputOption, TimeoutOption
from extension_reconciler.config.settings import settings
from extension_reconciler.core.helm_cli import HelmCLI
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.core.release_manager import ReleaseManager
from extension_reconciler.core.release_store import ReleaseStore
from extension_reconciler.output.formatters import output_release_info
from extension_reconciler.utils.deadline import deadline_after

app = typer.Typer()


@app.callback(invoke_without_command=True)
def release(
    name: str = typer.Argument(help="Release name"),
    output: str = OutputOption,
    namespace: Optional[str] = NamespaceOption,
    context: Optional[str] = ContextOption,
    show_values: bool = typer.Option(False, "--show-values", help="Display deployed values"),
    timeout: float = TimeoutOption,
) -> None:
    """Show the observed state of a Helm release."""
    ns = namespace or settings.extension_namespace
    k8s = K8sClient(context=context)
    manager = ReleaseManager(HelmCLI(kube_context=context), ReleaseStore(k8s))
    info = manager.get_release(name, ns, deadline=deadline_after(timeout))
    if info is None:
        typer.echo(f"Release '{name}' not found in {ns}.", err=True)
        raise typer.Exit(code=1)
    output_release_info(name, ns, info, output, show_values=show_values)
