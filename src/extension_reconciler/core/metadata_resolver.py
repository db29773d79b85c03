"""Derive UIPlugin catalog annotations from the repository index."""

from __future__ import annotations

from typing import Mapping

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import ChartNotFoundInIndexError, VersionNotFoundError
from extension_reconciler.core.index_cache import IndexCache
from extension_reconciler.models.index import IndexDocument
from extension_reconciler.utils.logging import KEY_EXTENSION, KEY_VERSION, component_logger

log = component_logger(__name__, component="rancher.metadata")


def find_annotations(index: IndexDocument, chart_name: str, version: str) -> dict[str, str]:
    """Annotations of an exact chart name and version string (no semver matching)."""
    versions = index.entries.get(chart_name)
    if versions is None:
        raise ChartNotFoundInIndexError(chart_name)
    for entry in versions:
        if entry.version == version:
            return entry.annotations
    raise VersionNotFoundError(chart_name, version)


def filter_supported_metadata(
    annotations: Mapping[str, str],
    supported: tuple[str, ...] | None = None,
) -> dict[str, str]:
    keys = supported if supported is not None else settings.supported_annotations
    return {key: annotations[key] for key in keys if key in annotations}


def merge_metadata(
    index_meta: Mapping[str, str],
    user_meta: Mapping[str, str] | None,
    extension_name: str,
    display_name_key: str | None = None,
) -> dict[str, str]:
    meta = dict(index_meta)
    # User overrides always win
    meta.update(user_meta or {})
    meta.setdefault(display_name_key or settings.annotation_display_name, extension_name)
    return meta


def resolve_extension_metadata(
    cache: IndexCache,
    repo_url: str,
    extension_name: str,
    version: str,
    user_meta: Mapping[str, str] | None = None,
    deadline: float | None = None,
) -> dict[str, str]:
    """Final annotation set for one extension version; the result is a fresh dict."""
    rlog = log.with_values(**{KEY_EXTENSION: extension_name, KEY_VERSION: version})
    rlog.debug("Resolving extension metadata from Helm index")

    try:
        index = cache.get_or_fetch(repo_url, deadline=deadline)
    except Exception as e:
        rlog.error("Failed to load Helm index: %s", e)
        raise

    try:
        annotations = find_annotations(index, extension_name, version)
    except Exception as e:
        rlog.error("Failed to find chart annotations in index.yaml: %s", e)
        raise

    index_meta = filter_supported_metadata(annotations)
    rlog.trace("Metadata extracted from index.yaml: %s", index_meta)

    final = merge_metadata(index_meta, user_meta, extension_name)
    rlog.debug(
        "Final UIPlugin metadata resolved: displayName=%s uiExtensionsVersion=%s",
        final.get(settings.annotation_display_name),
        final.get(settings.annotation_ui_extensions_version),
    )
    return dict(final)
