"""Decode Helm v3 release data from Kubernetes Secrets or ConfigMaps."""

from __future__ import annotations

import logging
from typing import Any

from extension_reconciler.models.release import HelmRelease
from extension_reconciler.utils.encoding import decode_release_configmap, decode_release_secret

logger = logging.getLogger(__name__)


def _decode(obj: Any, decode_payload) -> HelmRelease | None:
    data = obj.data
    if not data or "release" not in data:
        return None
    release = HelmRelease.from_dict(decode_payload(data["release"]))
    # Ensure namespace from the storage object metadata
    if not release.namespace and obj.metadata:
        release.namespace = obj.metadata.namespace or ""
    return release


def decode_secret(secret: Any) -> HelmRelease | None:
    """Decode a single Kubernetes Secret into a HelmRelease (None if unreadable)."""
    try:
        return _decode(secret, decode_release_secret)
    except (ValueError, OSError, KeyError, TypeError):
        logger.debug("Failed to decode secret %s", _safe_name(secret), exc_info=True)
        return None


def decode_configmap(cm: Any) -> HelmRelease | None:
    try:
        return _decode(cm, decode_release_configmap)
    except (ValueError, OSError, KeyError, TypeError):
        logger.debug("Failed to decode configmap %s", _safe_name(cm), exc_info=True)
        return None


def revision_from_labels(obj: Any) -> int:
    """Read the revision number from the ``version`` label without decoding."""
    labels = {}
    if getattr(obj, "metadata", None) and obj.metadata.labels:
        labels = obj.metadata.labels
    try:
        return int(labels.get("version", "0"))
    except ValueError:
        return 0


def _safe_name(obj: Any) -> str:
    if getattr(obj, "metadata", None):
        return obj.metadata.name or "<unknown>"
    return "<unknown>"
