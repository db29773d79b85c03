"""Create, update and delete Rancher catalog resources for an extension."""

from __future__ import annotations

from typing import Mapping, Union

from deepdiff import DeepDiff
from kubernetes.client import ApiException

from extension_reconciler.config.settings import settings as default_settings, Settings
from extension_reconciler.core.endpoint import endpoint_from_git_repo, plugin_endpoint
from extension_reconciler.core.errors import (
    CatalogAPIError,
    DependencyNotReadyError,
    ExtensionReconcilerError,
    SpecValidationError,
)
from extension_reconciler.core.index_cache import IndexCache
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.core.metadata_resolver import resolve_extension_metadata
from extension_reconciler.core.preflight import check_crds
from extension_reconciler.models.catalog import CATALOG_VERSION, ClusterRepo, UIPlugin
from extension_reconciler.models.extension import ExtensionRequest
from extension_reconciler.utils.deadline import remaining
from extension_reconciler.utils.logging import KEY_EXTENSION, KEY_NAME, KEY_NAMESPACE, KEY_RESOURCE, component_logger
from extension_reconciler.utils.merge_patch import extract_paths, managed_patch

log = component_logger(__name__, component="rancher")

CatalogResource = Union[ClusterRepo, UIPlugin]


def _wrap(e: ApiException, operation: str, kind: str, name: str) -> CatalogAPIError:
    return CatalogAPIError(operation, kind, name, e.status, e.reason or "")


class CatalogManager:
    """Idempotent ensure/delete of ClusterRepo and UIPlugin objects."""

    def __init__(
        self,
        k8s: K8sClient,
        index_cache: IndexCache | None = None,
        settings: Settings | None = None,
    ):
        self.k8s = k8s
        self.index_cache = index_cache if index_cache is not None else IndexCache()
        self.settings = settings or default_settings

    def _timeout(self, deadline: float | None, operation: str) -> float:
        return remaining(deadline, self.settings.k8s_request_timeout, operation)

    # -- generic create-or-patch ------------------------------------------

    def _ensure(self, resource: CatalogResource, deadline: float | None = None) -> str:
        """Create ``resource`` or patch its managed fields. Returns the action taken."""
        rlog = log.with_values(**{KEY_RESOURCE: resource.kind, KEY_NAME: resource.name})
        try:
            live = self.k8s.get_custom_object(
                resource.group, CATALOG_VERSION, resource.plural, resource.name,
                namespace=resource.namespace,
                timeout=self._timeout(deadline, f"get {resource.kind} {resource.name}"),
            )
        except ApiException as e:
            raise _wrap(e, "get", resource.kind, resource.name) from e

        if live is None:
            try:
                self.k8s.create_custom_object(
                    resource.group, CATALOG_VERSION, resource.plural, resource.to_manifest(),
                    namespace=resource.namespace,
                    timeout=self._timeout(deadline, f"create {resource.kind} {resource.name}"),
                )
            except ApiException as e:
                raise _wrap(e, "create", resource.kind, resource.name) from e
            rlog.info("%s created", resource.kind)
            return "created"

        desired = resource.desired_fields()
        changes = DeepDiff(
            extract_paths(live, resource.managed_paths),
            extract_paths(desired, resource.managed_paths),
        )
        if not changes:
            rlog.debug("%s already up to date", resource.kind)
            return "unchanged"

        patch = managed_patch(live, desired, resource.managed_paths)
        rlog.trace("Patching %s: %s", resource.kind, patch)
        try:
            self.k8s.patch_custom_object(
                resource.group, CATALOG_VERSION, resource.plural, resource.name, patch,
                namespace=resource.namespace,
                timeout=self._timeout(deadline, f"patch {resource.kind} {resource.name}"),
            )
        except ApiException as e:
            raise _wrap(e, "patch", resource.kind, resource.name) from e
        rlog.info("%s updated", resource.kind)
        return "updated"

    def _delete(
        self, group: str, plural: str, kind: str, name: str, namespace: str | None,
        deadline: float | None = None,
    ) -> None:
        rlog = log.with_values(**{KEY_RESOURCE: kind, KEY_NAME: name})
        rlog.info("Deleting %s", kind)
        timeout = self._timeout(deadline, f"delete {kind} {name}")
        try:
            deleted = self.k8s.delete_custom_object(
                group, CATALOG_VERSION, plural, name, namespace=namespace, timeout=timeout,
            )
        except ApiException as e:
            rlog.error("Failed to delete %s: %s", kind, e.reason)
            raise _wrap(e, "delete", kind, name) from e
        if deleted:
            rlog.info("%s deleted", kind)
        else:
            rlog.debug("%s already deleted or not found", kind)

    # -- ClusterRepo ------------------------------------------------------

    def ensure_cluster_repo(self, name: str, url: str, deadline: float | None = None) -> str:
        log.with_values(**{KEY_NAME: name}).info("Ensuring ClusterRepo")
        return self._ensure(ClusterRepo(name=name, url=url, group=self.settings.catalog_group), deadline)

    def delete_cluster_repo(self, name: str, deadline: float | None = None) -> None:
        self._delete(self.settings.catalog_group, ClusterRepo.plural, ClusterRepo.kind, name, None, deadline)

    # -- UIPlugin ---------------------------------------------------------

    def ensure_ui_plugin(
        self,
        name: str,
        endpoint: str,
        metadata: Mapping[str, str],
        version: str = "",
        deadline: float | None = None,
    ) -> str:
        log.with_values(**{KEY_NAME: name}).info("Ensuring UIPlugin")
        plugin = UIPlugin(
            name=name,
            namespace=self.settings.extension_namespace,
            plugin_name=name,
            version=version,
            endpoint=endpoint,
            metadata=dict(metadata),
            group=self.settings.catalog_group,
        )
        return self._ensure(plugin, deadline)

    def delete_ui_plugin(self, name: str, deadline: float | None = None) -> None:
        self._delete(
            self.settings.catalog_group, UIPlugin.plural, UIPlugin.kind, name,
            self.settings.extension_namespace, deadline,
        )

    # -- composition ------------------------------------------------------

    def ensure(self, request: ExtensionRequest, service_url: str, deadline: float | None = None) -> None:
        """CRD check, then ClusterRepo (Helm sources only), then UIPlugin.

        ``service_url`` is the base URL serving ``index.yaml``: the extension
        Service for Helm sources, the raw branch root for Git sources.
        """
        rlog = log.with_values(**{KEY_EXTENSION: request.name, KEY_NAMESPACE: request.namespace})
        rlog.info("Ensuring Rancher resources")

        try:
            check_crds(self.k8s, self.settings.required_crds, deadline=deadline)
        except DependencyNotReadyError:
            rlog.debug("Rancher CRDs not ready yet")
            raise

        ext = request.extension
        if request.helm is not None:
            self.ensure_cluster_repo(request.helm.name, service_url, deadline=deadline)
            endpoint = plugin_endpoint(service_url, ext.name, ext.version)
        elif request.repo is not None:
            endpoint = endpoint_from_git_repo(request.repo.url, request.repo.branch, ext.name, ext.version)
        else:
            raise SpecValidationError("either helm or repo must be set")

        metadata = resolve_extension_metadata(
            self.index_cache, service_url, ext.name, ext.version, ext.metadata, deadline=deadline,
        )
        self.ensure_ui_plugin(ext.name, endpoint, metadata, version=ext.version, deadline=deadline)
        rlog.info("Rancher resources ensured")

    def cleanup(self, request: ExtensionRequest | None, deadline: float | None = None) -> None:
        """Reverse of ``ensure``: UIPlugin first, then the ClusterRepo."""
        if request is None:
            return
        rlog = log.with_values(**{KEY_EXTENSION: request.name})
        rlog.info("Cleaning up Rancher resources")
        self.delete_ui_plugin(request.extension.name, deadline=deadline)
        if request.helm is not None:
            self.delete_cluster_repo(request.helm.name, deadline=deadline)
        rlog.info("Rancher cleanup completed")


def get_rancher_version(k8s: K8sClient, deadline: float | None = None) -> str:
    """Value of the ``server-version`` management setting."""
    timeout = remaining(deadline, default_settings.k8s_request_timeout, "get server-version")
    try:
        obj = k8s.get_custom_object(
            "management.cattle.io", "v3", "settings", "server-version", timeout=timeout,
        )
    except ApiException as e:
        raise _wrap(e, "get", "Setting", "server-version") from e
    if obj is None:
        raise ExtensionReconcilerError("server-version setting not found")
    value = obj.get("value")
    if not value:
        raise ExtensionReconcilerError("server-version setting is missing .value")
    return str(value)
