"""InstallAIExtension request models."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass
class HelmSource:
    name: str = ""
    url: str = ""
    version: str = ""
    values: dict[str, Any] = field(default_factory=dict)
    namespace: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> HelmSource:
        return cls(
            name=d.get("name", ""),
            url=d.get("url", ""),
            version=str(d.get("version", "")),
            values=copy.deepcopy(d.get("values") or {}),
            namespace=d.get("namespace", ""),
        )


@dataclass
class RepoSource:
    url: str = ""
    branch: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> RepoSource:
        return cls(url=d.get("url", ""), branch=d.get("branch", ""))


@dataclass
class ExtensionSpec:
    name: str = ""
    version: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> ExtensionSpec:
        return cls(
            name=d.get("name", ""),
            version=str(d.get("version", "")),
            metadata={str(k): str(v) for k, v in (d.get("metadata") or {}).items()},
        )


@dataclass
class ExtensionRequest:
    """One desired extension install; exactly one of ``helm``/``repo`` is expected."""

    name: str
    extension: ExtensionSpec = field(default_factory=ExtensionSpec)
    helm: HelmSource | None = None
    repo: RepoSource | None = None
    namespace: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ExtensionRequest:
        metadata = d.get("metadata") or {}
        spec = d.get("spec") or {}
        helm = spec.get("helm")
        repo = spec.get("repo")
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            extension=ExtensionSpec.from_dict(spec.get("extension") or {}),
            helm=HelmSource.from_dict(helm) if helm is not None else None,
            repo=RepoSource.from_dict(repo) if repo is not None else None,
        )
