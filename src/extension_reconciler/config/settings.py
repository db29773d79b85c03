"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_EXTENSION_NAMESPACE = "cattle-ui-plugin-system"
DEFAULT_CATALOG_DOMAIN = "cattle.io"


def _env(name: str, default: str) -> str:
    value = os.environ.get(name, "")
    return value if value else default


def _default_extension_namespace() -> str:
    return _env("EXTENSION_NAMESPACE", DEFAULT_EXTENSION_NAMESPACE)


def _default_catalog_domain() -> str:
    return _env("CATALOG_DOMAIN", DEFAULT_CATALOG_DOMAIN)


def _default_storage_driver() -> str:
    # Matches helm's own HELM_DRIVER variable; "secret" is helm's spelling.
    driver = _env("HELM_DRIVER", "secrets").lower()
    if driver in ("secret", "secrets", ""):
        return "secrets"
    if driver in ("configmap", "configmaps"):
        return "configmaps"
    return driver


@dataclass
class Settings:
    extension_namespace: str = field(default_factory=_default_extension_namespace)
    catalog_domain: str = field(default_factory=_default_catalog_domain)
    helm_binary: str = field(default_factory=lambda: _env("HELM_BINARY", "helm"))
    kube_context: str | None = field(default_factory=lambda: os.environ.get("KUBE_CONTEXT") or None)
    storage_driver: str = field(default_factory=_default_storage_driver)  # "secrets" or "configmaps"
    helm_label_selector: str = "owner=helm"
    secret_type: str = "helm.sh/release.v1"

    install_timeout: float = 300.0
    upgrade_timeout: float = 600.0
    render_timeout: float = 120.0
    uninstall_timeout: float = 300.0
    pull_timeout: float = 120.0
    index_fetch_timeout: float = 30.0
    k8s_request_timeout: int = 30

    @property
    def catalog_group(self) -> str:
        return f"catalog.{self.catalog_domain}"

    @property
    def annotation_display_name(self) -> str:
        return f"{self.catalog_group}/display-name"

    @property
    def annotation_rancher_version(self) -> str:
        return f"{self.catalog_group}/rancher-version"

    @property
    def annotation_ui_extensions_version(self) -> str:
        return f"{self.catalog_group}/ui-extensions-version"

    @property
    def supported_annotations(self) -> tuple[str, ...]:
        return (
            self.annotation_display_name,
            self.annotation_rancher_version,
            self.annotation_ui_extensions_version,
        )

    @property
    def required_crds(self) -> list[str]:
        return [
            f"uiplugins.{self.catalog_group}",
            f"clusterrepos.{self.catalog_group}",
        ]


# Global singleton
settings = Settings()
