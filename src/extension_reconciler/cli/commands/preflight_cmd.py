"""extrec preflight - Check required catalog CRDs."""

from __future__ import annotations

from typing import Optional

import typer
from kubernetes.client import ApiException

from extension_reconciler.cli.options import ContextOption, OutputOption, TimeoutOption
from extension_reconciler.config.settings import settings
from extension_reconciler.core.catalog_manager import get_rancher_version
from extension_reconciler.core.errors import DependencyNotReadyError, ExtensionReconcilerError
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.core.preflight import check_crds
from extension_reconciler.output.formatters import output_preflight
from extension_reconciler.utils.deadline import deadline_after

app = typer.Typer()


@app.callback(invoke_without_command=True)
def preflight(
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
    timeout: float = TimeoutOption,
) -> None:
    """Report which required CRDs are installed and the Rancher version."""
    k8s = K8sClient(context=context)
    deadline = deadline_after(timeout)
    results: list[tuple[str, bool]] = []
    try:
        for crd in settings.required_crds:
            try:
                check_crds(k8s, [crd], deadline=deadline)
                results.append((crd, True))
            except DependencyNotReadyError:
                results.append((crd, False))
    except ApiException as e:
        typer.echo(f"Cannot query CRDs: {e.status} {e.reason}", err=True)
        raise typer.Exit(code=1)
    except ExtensionReconcilerError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    try:
        rancher_version = get_rancher_version(k8s, deadline=deadline)
    except (ExtensionReconcilerError, ApiException):
        rancher_version = None

    output_preflight(results, rancher_version, output)
    if not all(present for _, present in results):
        raise typer.Exit(code=1)
