"""Helm release models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from extension_reconciler.models.chart import ChartMetadata


class ReleaseStatus(enum.Enum):
    DEPLOYED = "deployed"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    PENDING_INSTALL = "pending-install"
    PENDING_UPGRADE = "pending-upgrade"
    PENDING_ROLLBACK = "pending-rollback"
    UNINSTALLING = "uninstalling"
    UNINSTALLED = "uninstalled"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, s: str) -> ReleaseStatus:
        for member in cls:
            if member.value == s:
                return member
        return cls.UNKNOWN


@dataclass
class ReleaseSpec:
    """Desired end state of one release."""

    name: str
    namespace: str
    chart_ref: str
    version: str = ""
    values: dict[str, Any] = field(default_factory=dict)
    repo_url: str = ""


@dataclass(frozen=True)
class ReleaseInfo:
    """Observed state of the most recent revision of a release."""

    chart_name: str
    version: str
    values: dict[str, Any]
    status: ReleaseStatus
    revision: int


@dataclass
class HelmRelease:
    """A release record decoded from Helm's storage backend."""

    name: str = ""
    namespace: str = ""
    version: int = 0
    status: ReleaseStatus = ReleaseStatus.UNKNOWN
    chart: ChartMetadata = field(default_factory=ChartMetadata)
    config: dict = field(default_factory=dict)
    manifest: str = ""

    @property
    def chart_name(self) -> str:
        return self.chart.name

    @property
    def chart_version(self) -> str:
        return self.chart.version

    def to_info(self) -> ReleaseInfo:
        return ReleaseInfo(
            chart_name=self.chart_name,
            version=self.chart_version,
            values=dict(self.config),
            status=self.status,
            revision=self.version,
        )

    @classmethod
    def from_dict(cls, d: dict) -> HelmRelease:
        chart_raw = d.get("chart") or {}
        info = d.get("info") or {}
        return cls(
            name=d.get("name", ""),
            namespace=d.get("namespace", ""),
            version=d.get("version", 0),
            status=ReleaseStatus.from_str(info.get("status", "unknown")),
            chart=ChartMetadata.from_dict(chart_raw.get("metadata") or {}),
            config=d.get("config") or {},
            manifest=d.get("manifest", ""),
        )
