from __future__ import annotations

from extension_reconciler.utils.merge_patch import (
    apply_merge_patch,
    create_merge_patch,
    extract_paths,
    managed_patch,
)


def test_create_patch_nulls_removed_keys():
    assert create_merge_patch({"a": 1, "b": 2}, {"a": 1}) == {"b": None}


def test_create_patch_recurses_into_maps():
    current = {"spec": {"url": "old", "keep": True}}
    desired = {"spec": {"url": "new", "keep": True}}
    assert create_merge_patch(current, desired) == {"spec": {"url": "new"}}


def test_identical_documents_give_empty_patch():
    assert create_merge_patch({"a": {"b": [1, 2]}}, {"a": {"b": [1, 2]}}) == {}


def test_apply_patch_rfc7386_example():
    target = {"title": "Goodbye!", "author": {"givenName": "John", "familyName": "Doe"}, "tags": ["example", "sample"]}
    patch = {"title": "Hello!", "author": {"familyName": None}, "tags": ["example"], "phoneNumber": "+01-123"}

    assert apply_merge_patch(target, patch) == {
        "title": "Hello!",
        "author": {"givenName": "John"},
        "tags": ["example"],
        "phoneNumber": "+01-123",
    }
    assert target["title"] == "Goodbye!"


def test_extract_paths_skips_missing():
    obj = {"spec": {"plugin": {"name": "x"}}, "status": {}}
    assert extract_paths(obj, [("spec", "plugin", "name"), ("spec", "plugin", "endpoint")]) == {
        "spec": {"plugin": {"name": "x"}},
    }


def test_managed_patch_ignores_unowned_fields():
    live = {"spec": {"url": "a", "clientSecret": "s"}, "status": {"x": 1}}
    desired = {"spec": {"url": "b"}}
    assert managed_patch(live, desired, [("spec", "url")]) == {"spec": {"url": "b"}}
