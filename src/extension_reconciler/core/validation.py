"""Validate extension requests and derive release specs from them."""

from __future__ import annotations

import copy

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import SpecValidationError
from extension_reconciler.models import InstallSource
from extension_reconciler.models.extension import ExtensionRequest, HelmSource
from extension_reconciler.models.release import ReleaseSpec

_CHART_URL_SCHEMES = ("oci://", "http://", "https://")


def validate_spec(request: ExtensionRequest) -> InstallSource:
    """Exactly one of ``helm`` and ``repo`` must be set."""
    has_helm = request.helm is not None
    has_repo = request.repo is not None

    if has_helm and has_repo:
        raise SpecValidationError("only one of helm or repo may be set")
    if has_helm:
        return InstallSource.HELM
    if has_repo:
        return InstallSource.REPO
    raise SpecValidationError("either helm or repo must be set")


def _validate_helm(helm: HelmSource) -> None:
    if not helm.name:
        raise SpecValidationError("helm.name must be set")
    if not helm.url.startswith(_CHART_URL_SCHEMES):
        raise SpecValidationError(f"helm.url must start with oci://, http:// or https://: {helm.url!r}")


def chart_ref_for(helm: HelmSource) -> tuple[str, str]:
    """(chart reference, repository URL) for ``helm pull``.

    OCI URLs point at a registry namespace, so the chart name is appended
    unless the URL already ends with it. HTTP URLs are index repositories.
    """
    url = helm.url.rstrip("/")
    if url.startswith("oci://"):
        if url.rsplit("/", 1)[-1] == helm.name:
            return url, ""
        return f"{url}/{helm.name}", ""
    return helm.name, url


def release_spec_for(request: ExtensionRequest) -> ReleaseSpec:
    if request.helm is None:
        raise SpecValidationError("extension has no helm source")
    _validate_helm(request.helm)
    chart_ref, repo_url = chart_ref_for(request.helm)
    return ReleaseSpec(
        name=request.helm.name,
        namespace=request.helm.namespace or settings.extension_namespace,
        chart_ref=chart_ref,
        version=request.helm.version,
        values=copy.deepcopy(request.helm.values),
        repo_url=repo_url,
    )
