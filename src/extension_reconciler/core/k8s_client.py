"""Kubernetes API wrapper."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
from kubernetes.client import ApiException

from extension_reconciler.config.settings import settings


class K8sClient:
    """Thin wrapper around the Kubernetes Python client.

    API groups are created lazily so that constructing a client never touches
    kubeconfig; tests swap the properties for fakes.
    """

    def __init__(self, context: str | None = None, request_timeout: int | None = None):
        self.context = context if context is not None else settings.kube_context
        self.request_timeout = request_timeout or settings.k8s_request_timeout
        self._core_v1: client.CoreV1Api | None = None
        self._custom: client.CustomObjectsApi | None = None
        self._apiextensions_v1: client.ApiextensionsV1Api | None = None
        self._api_client: client.ApiClient | None = None

    def _timeout(self, timeout: float | None) -> float:
        return timeout if timeout is not None else self.request_timeout

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        except config.ConfigException:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            self._api_client = client.ApiClient(configuration=cfg)
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    @property
    def apiextensions_v1(self) -> client.ApiextensionsV1Api:
        if self._apiextensions_v1 is None:
            self._apiextensions_v1 = client.ApiextensionsV1Api(api_client=self._load_config())
        return self._apiextensions_v1

    # -- Helm storage -----------------------------------------------------

    def list_helm_secrets(self, namespace: str, release_name: str, timeout: float | None = None) -> list[Any]:
        """List the Secrets holding every revision of one Helm release."""
        result = self.core_v1.list_namespaced_secret(
            namespace=namespace,
            label_selector=f"{settings.helm_label_selector},name={release_name}",
            field_selector=f"type={settings.secret_type}",
            _request_timeout=self._timeout(timeout),
        )
        return result.items

    def list_helm_configmaps(self, namespace: str, release_name: str, timeout: float | None = None) -> list[Any]:
        result = self.core_v1.list_namespaced_config_map(
            namespace=namespace,
            label_selector=f"{settings.helm_label_selector},name={release_name}",
            _request_timeout=self._timeout(timeout),
        )
        return result.items

    # -- Services ---------------------------------------------------------

    def list_services(self, namespace: str, label_selector: str, timeout: float | None = None) -> list[Any]:
        result = self.core_v1.list_namespaced_service(
            namespace=namespace,
            label_selector=label_selector,
            _request_timeout=self._timeout(timeout),
        )
        return result.items

    # -- CRDs and custom objects ------------------------------------------

    def get_crd(self, name: str, timeout: float | None = None) -> Any:
        """Read a CustomResourceDefinition; raises ApiException (404 when absent)."""
        return self.apiextensions_v1.read_custom_resource_definition(
            name=name, _request_timeout=self._timeout(timeout),
        )

    def get_custom_object(
        self, group: str, version: str, plural: str, name: str, namespace: str | None = None,
        timeout: float | None = None,
    ) -> dict | None:
        """Get a custom object, or None if it does not exist."""
        try:
            if namespace:
                return self.custom.get_namespaced_custom_object(
                    group=group, version=version, namespace=namespace, plural=plural, name=name,
                    _request_timeout=self._timeout(timeout),
                )
            return self.custom.get_cluster_custom_object(
                group=group, version=version, plural=plural, name=name,
                _request_timeout=self._timeout(timeout),
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def create_custom_object(
        self, group: str, version: str, plural: str, body: dict, namespace: str | None = None,
        timeout: float | None = None,
    ) -> dict:
        if namespace:
            return self.custom.create_namespaced_custom_object(
                group=group, version=version, namespace=namespace, plural=plural, body=body,
                _request_timeout=self._timeout(timeout),
            )
        return self.custom.create_cluster_custom_object(
            group=group, version=version, plural=plural, body=body,
            _request_timeout=self._timeout(timeout),
        )

    def patch_custom_object(
        self, group: str, version: str, plural: str, name: str, patch: dict,
        namespace: str | None = None, timeout: float | None = None,
    ) -> dict:
        """Send a JSON merge patch (the client picks merge-patch for dict bodies)."""
        if namespace:
            return self.custom.patch_namespaced_custom_object(
                group=group, version=version, namespace=namespace, plural=plural, name=name,
                body=patch, _request_timeout=self._timeout(timeout),
            )
        return self.custom.patch_cluster_custom_object(
            group=group, version=version, plural=plural, name=name, body=patch,
            _request_timeout=self._timeout(timeout),
        )

    def delete_custom_object(
        self, group: str, version: str, plural: str, name: str, namespace: str | None = None,
        timeout: float | None = None,
    ) -> bool:
        """Delete a custom object. Returns False if it was already gone."""
        try:
            if namespace:
                self.custom.delete_namespaced_custom_object(
                    group=group, version=version, namespace=namespace, plural=plural, name=name,
                    _request_timeout=self._timeout(timeout),
                )
            else:
                self.custom.delete_cluster_custom_object(
                    group=group, version=version, plural=plural, name=name,
                    _request_timeout=self._timeout(timeout),
                )
        except ApiException as e:
            if e.status == 404:
                return False
            raise
        return True
