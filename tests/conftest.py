from __future__ import annotations

import copy
import threading
import time
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from kubernetes.client import ApiException

from extension_reconciler.config.settings import Settings
from extension_reconciler.core.errors import ReleaseNotFoundError
from extension_reconciler.models.chart import ChartMetadata, LoadedChart
from extension_reconciler.models.release import HelmRelease, ReleaseSpec, ReleaseStatus


class FakeHelm:
    """Records helm invocations; ``deployed`` maps release name to manifest."""

    def __init__(
        self,
        store: FakeStore,
        render_manifest: str = "kind: ConfigMap\n",
        delay: float = 0.0,
        render_from_values: bool = False,
    ):
        self.store = store
        self.render_manifest = render_manifest
        self.render_from_values = render_from_values
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self.events: list[tuple[int, str]] = []
        self.uninstall_error: Exception | None = None
        self._lock = threading.Lock()

    def _record(self, op: str, name: str) -> None:
        with self._lock:
            self.calls.append((op, name))
            self.events.append((threading.get_ident(), op))
        if self.delay:
            time.sleep(self.delay)

    def _manifest(self, spec: ReleaseSpec) -> str:
        if self.render_from_values:
            return f"values: {sorted(spec.values.items())}\n"
        return self.render_manifest

    def install(self, spec: ReleaseSpec, chart_path: str, timeout: float) -> None:
        self._record("install", spec.name)
        self.store.put(spec, self._manifest(spec))

    def upgrade(self, spec: ReleaseSpec, chart_path: str, timeout: float) -> None:
        self._record("upgrade", spec.name)
        self.store.put(spec, self._manifest(spec))

    def render_upgrade(self, spec: ReleaseSpec, chart_path: str, timeout: float) -> str:
        self._record("render", spec.name)
        return self._manifest(spec)

    def uninstall(self, name: str, namespace: str, timeout: float) -> None:
        self._record("uninstall", name)
        if self.uninstall_error is not None:
            raise self.uninstall_error
        if not self.store.remove(name, namespace):
            raise ReleaseNotFoundError(["uninstall", name], 1, "Error: uninstall: Release not loaded: release: not found")


class FakeStore:
    def __init__(self):
        self.releases: dict[tuple[str, str], HelmRelease] = {}
        self.fail_lookups = False
        self._lock = threading.Lock()

    def put(self, spec: ReleaseSpec, manifest: str) -> None:
        with self._lock:
            previous = self.releases.get((spec.name, spec.namespace))
            self.releases[(spec.name, spec.namespace)] = HelmRelease(
                name=spec.name,
                namespace=spec.namespace,
                version=(previous.version + 1) if previous else 1,
                status=ReleaseStatus.DEPLOYED,
                chart=ChartMetadata(name="chart", version=spec.version),
                config=copy.deepcopy(spec.values),
                manifest=manifest,
            )

    def remove(self, name: str, namespace: str) -> bool:
        with self._lock:
            return self.releases.pop((name, namespace), None) is not None

    def get_release(self, name: str, namespace: str, timeout: float | None = None) -> HelmRelease | None:
        if self.fail_lookups:
            raise ApiException(status=500, reason="Internal Server Error")
        with self._lock:
            return self.releases.get((name, namespace))


class FakeResolver:
    def __init__(self):
        self.resolved: list[str] = []
        self.error: Exception | None = None

    def resolve(self, ref: str, version: str, workdir: Path, repo_url: str = "", deadline: float | None = None) -> LoadedChart:
        if self.error is not None:
            raise self.error
        self.resolved.append(ref)
        return LoadedChart(metadata=ChartMetadata(name=ref, version=version), path=str(workdir / "chart.tgz"))


class FakeK8s:
    """In-memory custom objects, CRDs and Services."""

    def __init__(self, crds: set[str] | None = None):
        self.crds = set(crds or ())
        self.objects: dict[tuple[str, str, str | None, str], dict] = {}
        self.services: dict[str, list[Any]] = {}
        self.crd_error: ApiException | None = None
        self.crd_queries: list[str] = []
        self.patches: list[dict] = []
        self.creates = 0
        self.timeouts: list[float | None] = []

    def get_crd(self, name: str, timeout: float | None = None) -> dict:
        self.crd_queries.append(name)
        self.timeouts.append(timeout)
        if self.crd_error is not None:
            raise self.crd_error
        if name not in self.crds:
            raise ApiException(status=404, reason="Not Found")
        return {"metadata": {"name": name}}

    def get_custom_object(self, group, version, plural, name, namespace=None, timeout=None):
        self.timeouts.append(timeout)
        obj = self.objects.get((group, plural, namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    def create_custom_object(self, group, version, plural, body, namespace=None, timeout=None):
        self.timeouts.append(timeout)
        key = (group, plural, namespace, body["metadata"]["name"])
        if key in self.objects:
            raise ApiException(status=409, reason="Conflict")
        self.creates += 1
        self.objects[key] = copy.deepcopy(body)
        return body

    def patch_custom_object(self, group, version, plural, name, patch, namespace=None, timeout=None):
        self.timeouts.append(timeout)
        from extension_reconciler.utils.merge_patch import apply_merge_patch

        key = (group, plural, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        self.patches.append(copy.deepcopy(patch))
        self.objects[key] = apply_merge_patch(self.objects[key], patch)
        return self.objects[key]

    def delete_custom_object(self, group, version, plural, name, namespace=None, timeout=None):
        self.timeouts.append(timeout)
        return self.objects.pop((group, plural, namespace, name), None) is not None

    def list_services(self, namespace: str, label_selector: str, timeout: float | None = None) -> list[Any]:
        self.timeouts.append(timeout)
        return list(self.services.get(f"{namespace}/{label_selector}", []))


def make_service(name: str, namespace: str, port: int | None = 8080) -> SimpleNamespace:
    ports = [SimpleNamespace(port=port)] if port is not None else []
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name, namespace=namespace),
        spec=SimpleNamespace(ports=ports),
    )


@pytest.fixture
def test_settings() -> Settings:
    return Settings(extension_namespace="cattle-ui-plugin-system", catalog_domain="cattle.io")


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_helm(fake_store: FakeStore) -> FakeHelm:
    return FakeHelm(fake_store)


@pytest.fixture
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def fake_k8s(test_settings: Settings) -> FakeK8s:
    return FakeK8s(crds=set(test_settings.required_crds))
