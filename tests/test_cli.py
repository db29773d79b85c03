from __future__ import annotations

from kubernetes.client import ApiException
from typer.testing import CliRunner

from extension_reconciler.cli.app import app
from extension_reconciler.cli.commands import preflight_cmd
from extension_reconciler.config.settings import settings

from conftest import FakeK8s

runner = CliRunner()

HELM_MANIFEST = """\
apiVersion: ai-platform.suse.com/v1alpha1
kind: InstallAIExtension
metadata:
  name: install-suse-ai
spec:
  helm:
    name: suse-ai-ext
    url: oci://ghcr.io/acme/charts
    version: 1.0.0
  extension:
    name: suse-ai
    version: 1.0.0
"""


def test_validate_helm_manifest(tmp_path):
    manifest = tmp_path / "ext.yaml"
    manifest.write_text(HELM_MANIFEST)

    result = runner.invoke(app, ["validate", str(manifest)])

    assert result.exit_code == 0
    assert "valid" in result.output
    assert "oci://ghcr.io/acme/charts/suse-ai-ext" in result.output


def test_validate_rejects_both_sources(tmp_path):
    manifest = tmp_path / "ext.yaml"
    manifest.write_text(HELM_MANIFEST + "  repo:\n    url: https://github.com/acme/ext\n    branch: main\n")

    result = runner.invoke(app, ["validate", str(manifest)])

    assert result.exit_code == 1
    assert "only one of helm or repo" in result.output


def test_validate_reports_bad_yaml(tmp_path):
    manifest = tmp_path / "ext.yaml"
    manifest.write_text("spec: [unclosed\n")

    result = runner.invoke(app, ["validate", str(manifest)])

    assert result.exit_code == 2


def _fake_cluster(monkeypatch, k8s: FakeK8s) -> None:
    monkeypatch.setattr(preflight_cmd, "K8sClient", lambda context=None: k8s)


def test_preflight_reports_installed_crds(monkeypatch):
    k8s = FakeK8s(crds=set(settings.required_crds))
    k8s.objects[("management.cattle.io", "settings", None, "server-version")] = {"value": "v2.10.1"}
    _fake_cluster(monkeypatch, k8s)

    result = runner.invoke(app, ["preflight", "-o", "json"])

    assert result.exit_code == 0
    assert "v2.10.1" in result.output
    assert all(t is not None and t <= 60 for t in k8s.timeouts)


def test_preflight_fails_on_missing_crd(monkeypatch):
    _fake_cluster(monkeypatch, FakeK8s(crds=set(settings.required_crds[:1])))

    result = runner.invoke(app, ["preflight", "-o", "json"])

    assert result.exit_code == 1


def test_preflight_reports_api_errors_without_traceback(monkeypatch):
    k8s = FakeK8s()
    k8s.crd_error = ApiException(status=503, reason="Service Unavailable")
    _fake_cluster(monkeypatch, k8s)

    result = runner.invoke(app, ["preflight"])

    assert result.exit_code == 1
    assert "Cannot query CRDs: 503 Service Unavailable" in result.output
    assert not isinstance(result.exception, ApiException)
