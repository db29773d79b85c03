"""Decode Helm release payloads stored in Secrets and ConfigMaps."""

from __future__ import annotations

import base64
import gzip
import json

_GZIP_MAGIC = b"\x1f\x8b"


def _gunzip_json(payload: bytes) -> dict:
    return json.loads(gzip.decompress(payload).decode("utf-8"))


def decode_release_secret(data: bytes | str) -> dict:
    """Decode the ``release`` key of a Helm Secret.

    Helm stores base64(gzip(json)). The Kubernetes API adds its own base64
    layer for Secret data, which the Python client does not always strip, so
    one extra decode is applied when the gzip header is not found.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    decoded = base64.b64decode(data)
    if decoded[:2] != _GZIP_MAGIC:
        decoded = base64.b64decode(decoded)
    return _gunzip_json(decoded)


def decode_release_configmap(data: str) -> dict:
    """Decode the ``release`` key of a Helm ConfigMap: base64 → gzip → json."""
    decoded = base64.b64decode(data.encode("utf-8"))
    if decoded[:2] != _GZIP_MAGIC:
        decoded = base64.b64decode(decoded)
    return _gunzip_json(decoded)


def encode_release(payload: dict) -> str:
    """Encode a release dict the way Helm does (used by tests and fixtures)."""
    raw = json.dumps(payload).encode("utf-8")
    return base64.b64encode(gzip.compress(raw)).decode("ascii")
