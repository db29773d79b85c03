from __future__ import annotations

import base64
from types import SimpleNamespace

from extension_reconciler.core.release_store import ReleaseStore
from extension_reconciler.models.release import ReleaseStatus
from extension_reconciler.utils.encoding import decode_release_secret, encode_release


def _payload(revision: int, status: str) -> dict:
    return {
        "name": "suse-ai-ext",
        "namespace": "apps",
        "version": revision,
        "info": {"status": status},
        "chart": {"metadata": {"name": "suse-ai-ext", "version": f"1.0.{revision}"}},
        "config": {"replicas": revision},
        "manifest": f"# revision {revision}\n",
    }


def _secret(revision: int, status: str, double_encoded: bool = False) -> SimpleNamespace:
    data = encode_release(_payload(revision, status))
    if double_encoded:
        data = base64.b64encode(data.encode()).decode()
    return SimpleNamespace(
        data={"release": data},
        metadata=SimpleNamespace(
            name=f"sh.helm.release.v1.suse-ai-ext.v{revision}",
            namespace="apps",
            labels={"name": "suse-ai-ext", "owner": "helm", "version": str(revision)},
        ),
    )


class SecretsK8s:
    def __init__(self, objects):
        self.objects = objects
        self.queries: list[tuple[str, str]] = []
        self.timeouts: list[float | None] = []

    def list_helm_secrets(self, namespace, release_name, timeout=None):
        self.queries.append((namespace, release_name))
        self.timeouts.append(timeout)
        return self.objects

    def list_helm_configmaps(self, namespace, release_name, timeout=None):
        return []


def test_latest_revision_is_decoded():
    k8s = SecretsK8s([_secret(1, "superseded"), _secret(3, "deployed"), _secret(2, "superseded")])

    release = ReleaseStore(k8s, storage_driver="secrets").get_release("suse-ai-ext", "apps")

    assert release.version == 3
    assert release.status is ReleaseStatus.DEPLOYED
    assert release.manifest == "# revision 3\n"
    assert release.to_info().values == {"replicas": 3}
    assert k8s.queries == [("apps", "suse-ai-ext")]


def test_no_history_is_none():
    assert ReleaseStore(SecretsK8s([]), storage_driver="secrets").get_release("x", "apps") is None


def test_double_encoded_secret_payload():
    secret = _secret(1, "deployed", double_encoded=True)
    assert decode_release_secret(secret.data["release"])["version"] == 1


def test_configmap_driver_returns_none_without_objects():
    assert ReleaseStore(SecretsK8s([_secret(1, "deployed")]), storage_driver="configmaps").get_release("x", "apps") is None


def test_lookup_timeout_is_forwarded():
    k8s = SecretsK8s([_secret(1, "deployed")])
    ReleaseStore(k8s, storage_driver="secrets").get_release("x", "apps", timeout=7.5)
    assert k8s.timeouts == [7.5]
