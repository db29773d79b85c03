from __future__ import annotations

import pytest

from extension_reconciler.core.errors import ChartNotFoundInIndexError, VersionNotFoundError
from extension_reconciler.core.index_cache import IndexCache
from extension_reconciler.core.metadata_resolver import (
    filter_supported_metadata,
    merge_metadata,
    resolve_extension_metadata,
)
from extension_reconciler.models.index import IndexDocument

DISPLAY = "catalog.cattle.io/display-name"
RANCHER = "catalog.cattle.io/rancher-version"
UI_EXT = "catalog.cattle.io/ui-extensions-version"


def _cache(entries: dict) -> IndexCache:
    document = IndexDocument.from_dict({"entries": entries})
    return IndexCache(fetcher=lambda url, timeout=None: document)


@pytest.fixture
def cache() -> IndexCache:
    return _cache({
        "foo-ext": [
            {
                "version": "1.0.0",
                "annotations": {
                    DISPLAY: "Foo",
                    RANCHER: ">= 2.9.0",
                    UI_EXT: ">= 2.0.0 < 3.0.0",
                    "catalog.cattle.io/kube-version": ">= 1.26",
                },
            },
            {"version": "1.0.0-rc1", "annotations": {}},
        ],
        "acme": [{"version": "0.1.0"}],
    })


def test_index_display_name_is_used(cache):
    meta = resolve_extension_metadata(cache, "http://repo", "foo-ext", "1.0.0")
    assert meta[DISPLAY] == "Foo"


def test_user_override_wins(cache):
    meta = resolve_extension_metadata(cache, "http://repo", "foo-ext", "1.0.0", {DISPLAY: "Bar"})
    assert meta[DISPLAY] == "Bar"
    assert meta[RANCHER] == ">= 2.9.0"


def test_display_name_falls_back_to_extension_name(cache):
    meta = resolve_extension_metadata(cache, "http://repo", "acme", "0.1.0")
    assert meta == {DISPLAY: "acme"}


def test_unrecognized_index_annotations_are_dropped(cache):
    meta = resolve_extension_metadata(cache, "http://repo", "foo-ext", "1.0.0")
    assert set(meta) == {DISPLAY, RANCHER, UI_EXT}


def test_user_keys_pass_through_even_if_unrecognized(cache):
    meta = resolve_extension_metadata(cache, "http://repo", "acme", "0.1.0", {"custom": "x"})
    assert meta == {DISPLAY: "acme", "custom": "x"}


def test_version_match_is_exact(cache):
    with pytest.raises(VersionNotFoundError, match="'1.0'"):
        resolve_extension_metadata(cache, "http://repo", "foo-ext", "1.0")


def test_missing_chart_is_an_error(cache):
    with pytest.raises(ChartNotFoundInIndexError, match="missing"):
        resolve_extension_metadata(cache, "http://repo", "missing", "1.0.0")


def test_result_is_a_copy(cache):
    first = resolve_extension_metadata(cache, "http://repo", "foo-ext", "1.0.0")
    first[DISPLAY] = "mutated"

    second = resolve_extension_metadata(cache, "http://repo", "foo-ext", "1.0.0")
    assert second[DISPLAY] == "Foo"


def test_merge_does_not_mutate_inputs():
    index_meta = {DISPLAY: "Foo"}
    user_meta = {RANCHER: ">= 2.10.0"}

    merged = merge_metadata(index_meta, user_meta, "foo")

    assert merged == {DISPLAY: "Foo", RANCHER: ">= 2.10.0"}
    assert index_meta == {DISPLAY: "Foo"}
    assert user_meta == {RANCHER: ">= 2.10.0"}


def test_filter_respects_custom_domain():
    annotations = {"catalog.example.com/display-name": "X", DISPLAY: "Y"}
    assert filter_supported_metadata(annotations, ("catalog.example.com/display-name",)) == {
        "catalog.example.com/display-name": "X",
    }
