"""Check that the CRDs catalog resources depend on are installed."""

from __future__ import annotations

from typing import Iterable

from kubernetes.client import ApiException

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import DependencyNotReadyError
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.utils.deadline import remaining
from extension_reconciler.utils.logging import component_logger

log = component_logger(__name__, component="rancher.preflight")


def check_crds(k8s: K8sClient, crds: Iterable[str], deadline: float | None = None) -> None:
    """Raise DependencyNotReadyError for the first missing CRD, in order.

    Other API errors propagate unchanged.
    """
    for crd in crds:
        timeout = remaining(deadline, settings.k8s_request_timeout, f"get CRD {crd}")
        try:
            k8s.get_crd(crd, timeout=timeout)
        except ApiException as e:
            if e.status == 404:
                log.debug("Required CRD not found yet: logicalDependency=%s", crd)
                raise DependencyNotReadyError(crd) from e
            raise
    log.debug("All required CRDs are present")
