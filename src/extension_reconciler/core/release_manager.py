"""Install / upgrade / delete protocol for Helm releases.

At most one ``ensure_release`` runs per release name in this process. The
decision to install, upgrade or skip is made under that lock by comparing
the deployed manifest with a dry-run render of the desired spec.
"""

from __future__ import annotations

import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from extension_reconciler.config.settings import settings
from extension_reconciler.core.chart_resolver import ChartResolver
from extension_reconciler.core.errors import ReleaseNotFoundError
from extension_reconciler.core.helm_cli import HelmCLI
from extension_reconciler.core.release_store import ReleaseStore
from extension_reconciler.models.release import HelmRelease, ReleaseInfo, ReleaseSpec
from extension_reconciler.utils.deadline import remaining
from extension_reconciler.utils.logging import KEY_NAME, KEY_NAMESPACE, KEY_VERSION, component_logger

log = component_logger(__name__, component="helm")


def manifests_differ(current: str, rendered: str) -> bool:
    """Opaque string comparison; reordering alone counts as a change."""
    return current != rendered


class ReleaseManager:
    def __init__(
        self,
        helm: HelmCLI,
        store: ReleaseStore,
        resolver: ChartResolver | None = None,
        default_namespace: str | None = None,
    ):
        self.helm = helm
        self.store = store
        self.resolver = resolver or ChartResolver(helm)
        self.default_namespace = default_namespace or settings.extension_namespace
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _release_lock(self, name: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._locks[name] = lock
        with lock:
            yield

    def _lookup(self, name: str, namespace: str, deadline: float | None = None) -> HelmRelease | None:
        timeout = remaining(deadline, settings.k8s_request_timeout, f"get release {name}")
        # Lookup failures are reported as "absent"; callers cannot tell the two apart.
        try:
            return self.store.get_release(name, namespace, timeout=timeout)
        except Exception:
            log.with_values(**{KEY_NAME: name, KEY_NAMESPACE: namespace}).debug(
                "Release lookup failed, treating as absent", exc_info=True,
            )
            return None

    def get_release(
        self, name: str, namespace: str | None = None, deadline: float | None = None,
    ) -> ReleaseInfo | None:
        """Most recent revision of ``name``, or None (also on lookup failure)."""
        release = self._lookup(name, namespace or self.default_namespace, deadline)
        return release.to_info() if release else None

    def ensure_release(self, spec: ReleaseSpec, deadline: float | None = None) -> None:
        rlog = log.with_values(**{KEY_NAME: spec.name, KEY_NAMESPACE: spec.namespace})

        with self._release_lock(spec.name):
            current = self._lookup(spec.name, spec.namespace, deadline)
            with tempfile.TemporaryDirectory(prefix="chart-") as workdir:
                if current is None:
                    rlog.info("Helm release not found, installing")
                    self._install(spec, Path(workdir), deadline)
                    return

                chart = self.resolver.resolve(
                    spec.chart_ref, spec.version, Path(workdir),
                    repo_url=spec.repo_url, deadline=deadline,
                )
                timeout = remaining(deadline, settings.render_timeout, f"render {spec.name}")
                rendered = self.helm.render_upgrade(spec, chart.path, timeout)

                if not manifests_differ(current.manifest, rendered):
                    rlog.info("Helm release is up-to-date, skipping upgrade")
                    return

                rlog.info("Detected Helm manifest changes, upgrading")
                self._upgrade(spec, chart.path, deadline)

    def _install(self, spec: ReleaseSpec, workdir: Path, deadline: float | None) -> None:
        rlog = log.with_values(**{KEY_NAME: spec.name, KEY_NAMESPACE: spec.namespace, KEY_VERSION: spec.version})
        rlog.info("Installing Helm release")
        try:
            chart = self.resolver.resolve(
                spec.chart_ref, spec.version, workdir, repo_url=spec.repo_url, deadline=deadline,
            )
        except Exception as e:
            rlog.error("Failed to resolve Helm chart: %s", e)
            raise
        timeout = remaining(deadline, settings.install_timeout, f"install {spec.name}")
        try:
            self.helm.install(spec, chart.path, timeout)
        except Exception as e:
            rlog.error("Helm install failed: %s", e)
            raise
        rlog.info("Helm release installed successfully")

    def _upgrade(self, spec: ReleaseSpec, chart_path: str, deadline: float | None) -> None:
        rlog = log.with_values(**{KEY_NAME: spec.name, KEY_NAMESPACE: spec.namespace, KEY_VERSION: spec.version})
        rlog.info("Upgrading Helm release")
        timeout = remaining(deadline, settings.upgrade_timeout, f"upgrade {spec.name}")
        try:
            self.helm.upgrade(spec, chart_path, timeout)
        except Exception as e:
            rlog.error("Helm upgrade failed: %s", e)
            raise
        rlog.info("Helm release upgraded successfully")

    def delete_release(
        self, name: str, namespace: str | None = None, deadline: float | None = None,
    ) -> None:
        """Uninstall with foreground cascading; a missing release is success."""
        ns = namespace or self.default_namespace
        rlog = log.with_values(**{KEY_NAME: name, KEY_NAMESPACE: ns})
        timeout = remaining(deadline, settings.uninstall_timeout, f"uninstall {name}")
        try:
            self.helm.uninstall(name, ns, timeout)
        except ReleaseNotFoundError:
            rlog.info("Helm release already deleted")
            return
        except Exception as e:
            rlog.error("Failed to delete Helm release: %s", e)
            raise
        rlog.info("Helm release deleted")
