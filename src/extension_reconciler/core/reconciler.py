"""One reconcile pass for an InstallAIExtension object.

The watch loop that calls this (requeue timing, backoff, leader election)
lives outside the engine; it reads ``ReconcileResult.requeue`` to decide.
"""

from __future__ import annotations

from dataclasses import dataclass

from kubernetes.client import ApiException

from extension_reconciler.core.catalog_manager import CatalogManager
from extension_reconciler.core.endpoint import raw_repo_base, service_endpoint, service_for_release, service_url
from extension_reconciler.core.errors import DependencyNotReadyError, ExtensionReconcilerError
from extension_reconciler.core.k8s_client import K8sClient
from extension_reconciler.core.release_manager import ReleaseManager
from extension_reconciler.core.validation import release_spec_for, validate_spec
from extension_reconciler.models import ExtensionStatus, InstallSource, Phase
from extension_reconciler.models.extension import ExtensionRequest
from extension_reconciler.utils.logging import KEY_EXTENSION, KEY_PHASE, component_logger

log = component_logger(__name__, component="reconciler")


@dataclass
class ReconcileResult:
    status: ExtensionStatus
    requeue: bool = False


def classify_error(err: Exception) -> ReconcileResult:
    """Map an engine error onto a status and a requeue decision."""
    if isinstance(err, DependencyNotReadyError):
        return ReconcileResult(ExtensionStatus(Phase.PENDING, str(err)), requeue=True)
    if isinstance(err, ExtensionReconcilerError):
        return ReconcileResult(ExtensionStatus(Phase.FAILED, str(err)), requeue=err.retriable)
    if isinstance(err, ApiException):
        return ReconcileResult(ExtensionStatus(Phase.FAILED, f"API error: {err.reason}"), requeue=True)
    raise err


class ExtensionReconciler:
    def __init__(self, releases: ReleaseManager, catalog: CatalogManager, k8s: K8sClient):
        self.releases = releases
        self.catalog = catalog
        self.k8s = k8s

    def ensure(self, request: ExtensionRequest, deadline: float | None = None) -> None:
        """Drive the request to its installed state; errors propagate."""
        source = validate_spec(request)
        if source is InstallSource.HELM:
            spec = release_spec_for(request)
            self.releases.ensure_release(spec, deadline=deadline)
            svc = service_for_release(self.k8s, spec.namespace, spec.name, deadline=deadline)
            base_url = service_url(*service_endpoint(svc))
        else:
            base_url = raw_repo_base(request.repo.url, request.repo.branch)
        self.catalog.ensure(request, base_url, deadline=deadline)

    def reconcile(self, request: ExtensionRequest, deadline: float | None = None) -> ReconcileResult:
        rlog = log.with_values(**{KEY_EXTENSION: request.name})
        try:
            self.ensure(request, deadline=deadline)
        except (ExtensionReconcilerError, ApiException) as e:
            result = classify_error(e)
            if result.status.phase is Phase.PENDING:
                rlog.with_values(**{KEY_PHASE: result.status.phase.value}).info("Waiting: %s", e)
            else:
                rlog.with_values(**{KEY_PHASE: result.status.phase.value}).error("Reconcile failed: %s", e)
            return result
        rlog.with_values(**{KEY_PHASE: Phase.INSTALLED.value}).info("Extension installed")
        return ReconcileResult(ExtensionStatus(Phase.INSTALLED, "extension installed"))

    def finalize(self, request: ExtensionRequest, deadline: float | None = None) -> ReconcileResult:
        """Tear down catalog resources, then the release."""
        rlog = log.with_values(**{KEY_EXTENSION: request.name})
        try:
            self.catalog.cleanup(request, deadline=deadline)
            if request.helm is not None:
                spec = release_spec_for(request)
                self.releases.delete_release(spec.name, spec.namespace, deadline=deadline)
        except (ExtensionReconcilerError, ApiException) as e:
            rlog.error("Finalize failed: %s", e)
            return classify_error(e)
        return ReconcileResult(ExtensionStatus(Phase.DELETED, "extension removed"))
