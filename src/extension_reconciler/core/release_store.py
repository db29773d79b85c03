"""Read the latest revision of a release from Helm's storage backend."""

from __future__ import annotations

from extension_reconciler.config.settings import settings
from extension_reconciler.core.helm_decoder import decode_configmap, decode_secret, revision_from_labels
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.models.release import HelmRelease


class ReleaseStore:
    """Looks up Helm releases by reading the Secrets/ConfigMaps Helm writes."""

    def __init__(self, k8s: K8sClient, storage_driver: str | None = None):
        self.k8s = k8s
        self.storage_driver = storage_driver or settings.storage_driver

    def get_release(self, name: str, namespace: str, timeout: float | None = None) -> HelmRelease | None:
        """Latest revision of ``name`` in ``namespace``, or None if it has no history."""
        if self.storage_driver == "configmaps":
            objects = self.k8s.list_helm_configmaps(namespace=namespace, release_name=name, timeout=timeout)
            decode_fn = decode_configmap
        else:
            objects = self.k8s.list_helm_secrets(namespace=namespace, release_name=name, timeout=timeout)
            decode_fn = decode_secret

        if not objects:
            return None

        # Pick the highest revision
        latest = max(objects, key=revision_from_labels)
        return decode_fn(latest)
