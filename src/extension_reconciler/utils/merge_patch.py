"""JSON merge patch (RFC 7386) helpers restricted to an allowlist of paths."""

from __future__ import annotations

import copy
from typing import Any, Iterable

_MISSING = object()


def _get_path(obj: dict, path: tuple[str, ...]) -> Any:
    cur: Any = obj
    for key in path:
        if not isinstance(cur, dict) or key not in cur:
            return _MISSING
        cur = cur[key]
    return cur


def _set_path(obj: dict, path: tuple[str, ...], value: Any) -> None:
    cur = obj
    for key in path[:-1]:
        nxt = cur.get(key)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[key] = nxt
        cur = nxt
    cur[path[-1]] = value


def extract_paths(obj: dict, paths: Iterable[tuple[str, ...]]) -> dict[str, Any]:
    """Return a sparse copy of ``obj`` holding only the given paths."""
    out: dict[str, Any] = {}
    for path in paths:
        value = _get_path(obj, path)
        if value is not _MISSING:
            _set_path(out, path, copy.deepcopy(value))
    return out


def create_merge_patch(current: Any, desired: Any) -> Any:
    """Build the merge patch that turns ``current`` into ``desired``.

    Keys present in ``current`` but absent from ``desired`` become ``None``.
    Returns ``{}`` when nothing differs.
    """
    if not isinstance(current, dict) or not isinstance(desired, dict):
        return copy.deepcopy(desired)
    patch: dict[str, Any] = {}
    for key, value in desired.items():
        if key not in current:
            patch[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(current[key], dict):
            inner = create_merge_patch(current[key], value)
            if inner:
                patch[key] = inner
        elif current[key] != value:
            patch[key] = copy.deepcopy(value)
    for key in current:
        if key not in desired:
            patch[key] = None
    return patch


def apply_merge_patch(target: Any, patch: Any) -> Any:
    """Apply a merge patch and return the result; ``target`` is left untouched."""
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = apply_merge_patch(result.get(key), value)
    return result


def managed_patch(live: dict, desired: dict, paths: Iterable[tuple[str, ...]]) -> dict[str, Any]:
    """Merge patch for the allowlisted ``paths`` only."""
    paths = list(paths)
    return create_merge_patch(extract_paths(live, paths), extract_paths(desired, paths))
