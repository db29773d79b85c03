"""Error taxonomy for the reconciliation engine.

``retriable`` tells the caller whether requeueing can help without a spec
change. Not-found-on-delete has no class: delete operations treat it as
success.
"""

from __future__ import annotations


class ExtensionReconcilerError(Exception):
    retriable: bool = True


class DependencyNotReadyError(ExtensionReconcilerError):
    """A required CRD is not installed yet; requeue without alarming."""

    def __init__(self, dependency: str):
        super().__init__(f"dependency {dependency!r} is not ready")
        self.dependency = dependency


class SpecValidationError(ExtensionReconcilerError):
    retriable = False


# -- resolution failures ---------------------------------------------------

class IndexLookupError(ExtensionReconcilerError):
    retriable = False


class ChartNotFoundInIndexError(IndexLookupError):
    def __init__(self, chart_name: str):
        super().__init__(f"chart {chart_name!r} not found in index")
        self.chart_name = chart_name


class VersionNotFoundError(IndexLookupError):
    def __init__(self, chart_name: str, version: str):
        super().__init__(f"version {version!r} not found for chart {chart_name!r}")
        self.chart_name = chart_name
        self.version = version


class ChartResolutionError(ExtensionReconcilerError):
    retriable = False


class ChartLocateError(ChartResolutionError):
    """The reference could not be found or fetched; may succeed later."""

    retriable = True

    def __init__(self, ref: str, reason: str):
        super().__init__(f"failed to locate chart {ref!r}: {reason}")
        self.ref = ref


class MissingDependencyError(ChartResolutionError):
    def __init__(self, chart_name: str, missing: list[str]):
        super().__init__(
            f"missing dependencies for chart {chart_name!r}: {', '.join(missing)}"
        )
        self.chart_name = chart_name
        self.missing = missing


# -- backend / transport failures ------------------------------------------

class IndexFetchError(ExtensionReconcilerError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"failed to fetch index {url}: {reason}")
        self.url = url


class IndexParseError(IndexFetchError):
    pass


class HelmCommandError(ExtensionReconcilerError):
    def __init__(self, args: list[str], returncode: int, stderr: str):
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"helm {' '.join(args[:2])} failed: {detail}")
        self.helm_args = args
        self.returncode = returncode
        self.stderr = stderr


class ReleaseNotFoundError(HelmCommandError):
    pass


class HelmTimeoutError(ExtensionReconcilerError):
    def __init__(self, args: list[str], timeout: float):
        super().__init__(f"helm {' '.join(args[:2])} timed out after {timeout:.0f}s")
        self.helm_args = args
        self.timeout = timeout


class DeadlineExceededError(ExtensionReconcilerError):
    def __init__(self, operation: str):
        super().__init__(f"deadline exceeded before {operation}")
        self.operation = operation


class CatalogAPIError(ExtensionReconcilerError):
    def __init__(self, operation: str, kind: str, name: str, status: int | None, reason: str = ""):
        msg = f"{operation} {kind} {name!r} failed"
        if status is not None:
            msg += f" (HTTP {status})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.operation = operation
        self.kind = kind
        self.name = name
        self.status = status


class ServiceNotFoundError(ExtensionReconcilerError):
    def __init__(self, release_name: str, namespace: str):
        super().__init__(f"no service found for release {release_name!r} in {namespace!r}")
        self.release_name = release_name
        self.namespace = namespace
