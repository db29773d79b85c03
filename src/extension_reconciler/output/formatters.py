"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from extension_reconciler.models.release import ReleaseInfo

console = Console()


def _emit(data: Any, fmt: str) -> bool:
    """Print ``data`` as JSON or YAML; False means the caller renders a table."""
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2, default=str))
        return True
    if fmt == "yaml":
        console.print(yaml.dump(data, default_flow_style=False))
        return True
    return False


def _release_to_dict(name: str, namespace: str, info: ReleaseInfo) -> dict[str, Any]:
    return {
        "name": name,
        "namespace": namespace,
        "status": info.status.value,
        "revision": info.revision,
        "chart": info.chart_name,
        "chart_version": info.version,
    }


def output_release_info(
    name: str, namespace: str, info: ReleaseInfo, fmt: str, show_values: bool = False,
) -> None:
    data = _release_to_dict(name, namespace, info)
    if show_values:
        data["values"] = info.values
    if _emit(data, fmt):
        return
    from extension_reconciler.output.tables import release_info_panel, values_panel
    console.print(release_info_panel(name, namespace, info))
    if show_values:
        console.print(values_panel(info.values))


def output_metadata(name: str, version: str, metadata: dict[str, str], fmt: str) -> None:
    if _emit({"extension": name, "version": version, "metadata": metadata}, fmt):
        return
    from extension_reconciler.output.tables import metadata_table
    console.print(metadata_table(metadata, title=f"Catalog metadata: {name} {version}"))


def output_preflight(results: list[tuple[str, bool]], rancher_version: str | None, fmt: str) -> None:
    data = {
        "rancher_version": rancher_version,
        "crds": [{"name": name, "present": present} for name, present in results],
    }
    if _emit(data, fmt):
        return
    from extension_reconciler.output.tables import crd_table
    console.print(crd_table(results))
    if rancher_version:
        console.print(f"Rancher server version: [bold]{rancher_version}[/bold]")
