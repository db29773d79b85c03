"""Build plugin endpoints from Services and Git repositories."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import ExtensionReconcilerError, ServiceNotFoundError, SpecValidationError
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.utils.deadline import remaining

INSTANCE_LABEL = "app.kubernetes.io/instance"
RAW_GITHUB = "https://raw.githubusercontent.com"


def service_for_release(
    k8s: K8sClient, namespace: str, release_name: str, deadline: float | None = None,
) -> Any:
    """First Service labelled with the release's instance name."""
    timeout = remaining(deadline, settings.k8s_request_timeout, f"list services for {release_name}")
    services = k8s.list_services(namespace, f"{INSTANCE_LABEL}={release_name}", timeout=timeout)
    if not services:
        raise ServiceNotFoundError(release_name, namespace)
    return services[0]


def service_endpoint(svc: Any) -> tuple[str, str, int]:
    """(name, namespace, first port) of a Service object."""
    if svc is None:
        raise ExtensionReconcilerError("service is nil")
    ports = svc.spec.ports if svc.spec else None
    if not ports:
        raise ExtensionReconcilerError(f"service {svc.metadata.name} has no ports")
    return svc.metadata.name, svc.metadata.namespace, int(ports[0].port)


def service_url(name: str, namespace: str, port: int) -> str:
    return f"http://{name}.{namespace}.svc.cluster.local:{port}"


def plugin_endpoint(base_url: str, plugin_name: str, version: str) -> str:
    """Path under which an extension server publishes one plugin build."""
    return f"{base_url.rstrip('/')}/plugin/{plugin_name}-{version}"


def _repo_owner_and_name(repo_url: str) -> tuple[str, str]:
    path = urlparse(repo_url).path
    if path.endswith(".git"):
        path = path[: -len(".git")]
    parts = path.split("/")
    if len(parts) < 3 or not parts[1] or not parts[2]:
        raise SpecValidationError(f"unexpected repo path: {path}")
    return parts[1], parts[2]


def raw_repo_base(repo_url: str, branch: str) -> str:
    """Root of a GitHub branch as served by raw.githubusercontent.com."""
    if not repo_url or not branch:
        raise SpecValidationError("repoURL and branch must be set")
    owner, repo = _repo_owner_and_name(repo_url)
    return f"{RAW_GITHUB}/{owner}/{repo}/{branch}"


def endpoint_from_git_repo(repo_url: str, branch: str, plugin_name: str, version: str) -> str:
    if not (repo_url and branch and plugin_name and version):
        raise SpecValidationError("repoURL, branch, pluginName and version must be set")
    return f"{raw_repo_base(repo_url, branch)}/extensions/{plugin_name}/{version}"
