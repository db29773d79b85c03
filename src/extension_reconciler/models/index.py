"""Repository index models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ChartVersionEntry:
    version: str
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexDocument:
    """Parsed ``index.yaml``: chart name -> versions in published order."""

    entries: dict[str, tuple[ChartVersionEntry, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict | None) -> IndexDocument:
        if not d:
            return cls()
        entries: dict[str, tuple[ChartVersionEntry, ...]] = {}
        for chart_name, chart_entries in (d.get("entries") or {}).items():
            entries[chart_name] = tuple(
                ChartVersionEntry(
                    version=str(e.get("version", "")),
                    annotations={str(k): str(v) for k, v in (e.get("annotations") or {}).items()},
                )
                for e in chart_entries or []
                if isinstance(e, dict)
            )
        return cls(entries=entries)


@dataclass(frozen=True)
class IndexCacheEntry:
    index: IndexDocument
    fetched_at: datetime
