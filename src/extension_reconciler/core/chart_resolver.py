"""Locate, load and dependency-check chart bundles."""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path

import yaml

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import (
    ChartLocateError,
    HelmCommandError,
    HelmTimeoutError,
    MissingDependencyError,
)
from extension_reconciler.core.helm_cli import HelmCLI
from extension_reconciler.models.chart import ChartMetadata, LoadedChart
from extension_reconciler.utils.deadline import remaining

logger = logging.getLogger(__name__)

# Prefer the C-accelerated YAML loader when available.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


def _load_yaml(text: str | bytes) -> dict:
    data = yaml.load(text, Loader=_YamlLoader)
    return data if isinstance(data, dict) else {}


def _chart_name_from_archive(data: bytes) -> str:
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
        for member in tar.getmembers():
            parts = member.name.split("/")
            if len(parts) == 2 and parts[1] == "Chart.yaml":
                fh = tar.extractfile(member)
                if fh is not None:
                    return _load_yaml(fh.read()).get("name", "")
    return ""


def load_chart_dir(path: Path) -> LoadedChart:
    chart_file = path / "Chart.yaml"
    if not chart_file.is_file():
        raise ChartLocateError(str(path), "Chart.yaml not found")
    raw = _load_yaml(chart_file.read_text(encoding="utf-8"))
    requirements = path / "requirements.yaml"
    if requirements.is_file() and not raw.get("dependencies"):
        raw["dependencies"] = _load_yaml(requirements.read_text(encoding="utf-8")).get("dependencies", [])

    subcharts: list[str] = []
    charts_dir = path / "charts"
    if charts_dir.is_dir():
        for entry in sorted(charts_dir.iterdir()):
            if entry.is_dir() and (entry / "Chart.yaml").is_file():
                subcharts.append(_load_yaml((entry / "Chart.yaml").read_text(encoding="utf-8")).get("name", entry.name))
            elif entry.suffix == ".tgz":
                name = _chart_name_from_archive(entry.read_bytes())
                if name:
                    subcharts.append(name)
    return LoadedChart(metadata=ChartMetadata.from_dict(raw), path=str(path), subcharts=subcharts)


def load_chart_archive(path: Path) -> LoadedChart:
    """Read Chart.yaml, requirements.yaml and subchart names from a ``.tgz``."""
    try:
        tar = tarfile.open(path, mode="r:gz")
    except (tarfile.TarError, OSError) as e:
        raise ChartLocateError(str(path), f"not a chart archive: {e}") from e

    raw: dict = {}
    requirements: dict = {}
    subcharts: list[str] = []
    with tar:
        for member in tar.getmembers():
            parts = member.name.split("/")
            if not member.isfile() or len(parts) < 2:
                continue
            fh = tar.extractfile(member)
            if fh is None:
                continue
            if len(parts) == 2 and parts[1] == "Chart.yaml":
                raw = _load_yaml(fh.read())
            elif len(parts) == 2 and parts[1] == "requirements.yaml":
                requirements = _load_yaml(fh.read())
            elif len(parts) == 4 and parts[1] == "charts" and parts[3] == "Chart.yaml":
                subcharts.append(_load_yaml(fh.read()).get("name", parts[2]))
            elif len(parts) == 3 and parts[1] == "charts" and parts[2].endswith(".tgz"):
                name = _chart_name_from_archive(fh.read())
                if name:
                    subcharts.append(name)

    if not raw:
        raise ChartLocateError(str(path), "Chart.yaml not found in archive")
    if requirements and not raw.get("dependencies"):
        raw["dependencies"] = requirements.get("dependencies", [])
    return LoadedChart(metadata=ChartMetadata.from_dict(raw), path=str(path), subcharts=subcharts)


def check_dependencies(chart: LoadedChart) -> None:
    """Every declared dependency must be bundled under ``charts/``."""
    present = set(chart.subcharts)
    missing = [d.name for d in chart.metadata.dependencies if d.name not in present]
    if missing:
        raise MissingDependencyError(chart.name, missing)


class ChartResolver:
    """Turns a chart reference into a loaded, dependency-checked chart on disk.

    Precedence: existing local path, ``oci://`` registry reference, repository
    coordinate (explicit ``repo_url`` or an ``http(s)://`` chart URL), then a
    plain ``repo/chart`` name known to the local helm configuration.
    """

    def __init__(self, helm: HelmCLI):
        self.helm = helm

    def locate(
        self,
        ref: str,
        version: str,
        workdir: Path,
        repo_url: str = "",
        deadline: float | None = None,
    ) -> Path:
        local = Path(ref)
        if not ref.startswith(("oci://", "http://", "https://")) and local.exists():
            logger.debug("Using local chart %s", local)
            return local

        timeout = remaining(deadline, settings.pull_timeout, f"pull {ref}")
        try:
            if ref.startswith("oci://"):
                logger.debug("Pulling chart %s:%s from registry", ref, version)
                return self.helm.pull(ref, version, workdir, timeout)
            if repo_url:
                logger.debug("Pulling chart %s:%s from %s", ref, version, repo_url)
                return self.helm.pull(ref, version, workdir, timeout, repo_url=repo_url)
            logger.debug("Pulling chart %s:%s", ref, version)
            return self.helm.pull(ref, version, workdir, timeout)
        except (HelmCommandError, HelmTimeoutError) as e:
            raise ChartLocateError(ref, str(e)) from e

    def resolve(
        self,
        ref: str,
        version: str,
        workdir: Path,
        repo_url: str = "",
        deadline: float | None = None,
    ) -> LoadedChart:
        """Locate, load and validate a chart; ``workdir`` must outlive its use."""
        path = self.locate(ref, version, workdir, repo_url=repo_url, deadline=deadline)
        chart = load_chart_dir(path) if path.is_dir() else load_chart_archive(path)
        check_dependencies(chart)
        return chart
