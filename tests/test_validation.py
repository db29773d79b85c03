from __future__ import annotations

import pytest

from extension_reconciler.core.errors import SpecValidationError
from extension_reconciler.core.validation import chart_ref_for, release_spec_for, validate_spec
from extension_reconciler.models import InstallSource
from extension_reconciler.models.extension import ExtensionRequest, ExtensionSpec, HelmSource, RepoSource

HELM = HelmSource(name="suse-ai-ext", url="oci://ghcr.io/acme/charts", version="1.0.0", values={"a": {"b": 1}})
REPO = RepoSource(url="https://github.com/acme/ui-extensions", branch="main")


def _request(helm=None, repo=None) -> ExtensionRequest:
    return ExtensionRequest(name="ext", extension=ExtensionSpec(name="suse-ai", version="1.0.0"), helm=helm, repo=repo)


def test_helm_only_is_valid():
    assert validate_spec(_request(helm=HELM)) is InstallSource.HELM


def test_repo_only_is_valid():
    assert validate_spec(_request(repo=REPO)) is InstallSource.REPO


def test_both_sources_rejected():
    with pytest.raises(SpecValidationError, match="only one"):
        validate_spec(_request(helm=HELM, repo=REPO))


def test_no_source_rejected():
    with pytest.raises(SpecValidationError, match="either helm or repo"):
        validate_spec(_request())


def test_validation_errors_are_not_retriable():
    with pytest.raises(SpecValidationError) as excinfo:
        validate_spec(_request())
    assert excinfo.value.retriable is False


def test_from_dict_reads_kubernetes_object():
    request = ExtensionRequest.from_dict({
        "apiVersion": "ai-platform.suse.com/v1alpha1",
        "kind": "InstallAIExtension",
        "metadata": {"name": "suse-ai"},
        "spec": {
            "helm": {"name": "suse-ai-ext", "url": "https://charts.example.com", "version": "1.0.0"},
            "extension": {"name": "suse-ai", "version": "1.0.0", "metadata": {"k": "v"}},
        },
    })

    assert request.name == "suse-ai"
    assert request.repo is None
    assert request.helm.url == "https://charts.example.com"
    assert request.extension.metadata == {"k": "v"}
    assert validate_spec(request) is InstallSource.HELM


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("oci://ghcr.io/acme/charts", ("oci://ghcr.io/acme/charts/suse-ai-ext", "")),
        ("oci://ghcr.io/acme/charts/suse-ai-ext", ("oci://ghcr.io/acme/charts/suse-ai-ext", "")),
        ("https://charts.example.com/", ("suse-ai-ext", "https://charts.example.com")),
    ],
)
def test_chart_ref_for(url, expected):
    assert chart_ref_for(HelmSource(name="suse-ai-ext", url=url)) == expected


def test_release_spec_defaults_namespace_and_copies_values():
    request = _request(helm=HELM)

    spec = release_spec_for(request)
    spec.values["a"]["b"] = 2

    assert spec.namespace == "cattle-ui-plugin-system"
    assert spec.version == "1.0.0"
    assert HELM.values == {"a": {"b": 1}}


def test_release_spec_rejects_unsupported_url():
    with pytest.raises(SpecValidationError, match="helm.url"):
        release_spec_for(_request(helm=HelmSource(name="x", url="ftp://example.com")))
