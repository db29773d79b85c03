"""Typed catalog resources managed through the custom objects API.

Each resource knows its coordinates, how to render itself as a full object for
creation and which nested paths it owns. Updates only ever touch those paths,
so fields written by Rancher or by users survive a reconcile.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

CATALOG_VERSION = "v1"

FieldPath = tuple[str, ...]


@dataclass
class ClusterRepo:
    name: str
    url: str
    group: str = "catalog.cattle.io"

    kind: ClassVar[str] = "ClusterRepo"
    plural: ClassVar[str] = "clusterrepos"
    namespace: ClassVar[str | None] = None
    managed_paths: ClassVar[tuple[FieldPath, ...]] = (("spec", "url"),)

    @property
    def api_version(self) -> str:
        return f"{self.group}/{CATALOG_VERSION}"

    def desired_fields(self) -> dict[str, Any]:
        return {"spec": {"url": self.url}}

    def to_manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {"name": self.name},
            **self.desired_fields(),
        }


@dataclass
class UIPlugin:
    name: str
    namespace: str
    plugin_name: str
    version: str
    endpoint: str
    metadata: dict[str, str] = field(default_factory=dict)
    no_cache: bool = False
    group: str = "catalog.cattle.io"

    kind: ClassVar[str] = "UIPlugin"
    plural: ClassVar[str] = "uiplugins"
    managed_paths: ClassVar[tuple[FieldPath, ...]] = (
        ("spec", "plugin", "name"),
        ("spec", "plugin", "version"),
        ("spec", "plugin", "endpoint"),
        ("spec", "plugin", "noCache"),
        ("spec", "plugin", "metadata"),
    )

    @property
    def api_version(self) -> str:
        return f"{self.group}/{CATALOG_VERSION}"

    def desired_fields(self) -> dict[str, Any]:
        return {
            "spec": {
                "plugin": {
                    "name": self.plugin_name,
                    "version": self.version,
                    "endpoint": self.endpoint,
                    "noCache": self.no_cache,
                    "metadata": dict(self.metadata),
                },
            },
        }

    def to_manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {"name": self.name, "namespace": self.namespace},
            **self.desired_fields(),
        }
