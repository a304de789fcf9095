"""Tests for the extension -> MIME set registry."""

import pytest

from multimime.registry import (
    MimeRegistry,
    lookup_mimes,
    normalize_mime_set,
    normalize_mimes,
    settings_mime_filter,
)


def test_normalize_wraps_singleton():
    """Test that a single MIME string becomes a one-element list."""
    assert normalize_mime_set({"json": "application/json"}) == {"json": ["application/json"]}


def test_normalize_keeps_order_and_drops_duplicates():
    """Test that duplicates are removed without changing the primary type."""
    result = normalize_mimes(["application/acad", "image/vnd.dwg", "application/acad"])
    assert result == ["application/acad", "image/vnd.dwg"]


def test_normalize_coerces_malformed_entries():
    """Test best-effort coercion of keys and values."""
    raw = {
        ".DWG": ("application/acad",),
        "bin": 42,
        "": "text/plain",
        "none": None,
        "mixed": ["text/x-a", None, "  ", "text/x-b"],
    }

    result = normalize_mime_set(raw)

    assert result == {
        "dwg": ["application/acad"],
        "bin": ["42"],
        "mixed": ["text/x-a", "text/x-b"],
    }


@pytest.mark.parametrize("raw", [None, {}, [], "dwg"])
def test_normalize_empty_or_not_a_mapping(raw):
    """Test that missing or non-mapping registries normalize to empty."""
    assert normalize_mime_set(raw) == {}


def test_normalize_does_not_mutate_input():
    """Test that the integrator's mapping is left untouched."""
    raw = {"json": "application/json"}
    normalize_mime_set(raw)
    assert raw == {"json": "application/json"}


def test_lookup_honors_alternation_keys():
    """Test that every alternative of a pipe-separated key matches."""
    registry = {"jpg|jpeg": ["image/jpeg", "image/pjpeg"], "dwg": ["application/acad"]}

    assert lookup_mimes(registry, "jpeg") == ["image/jpeg", "image/pjpeg"]
    assert lookup_mimes(registry, "DWG") == ["application/acad"]
    assert lookup_mimes(registry, "png") == []
    assert lookup_mimes(registry, None) == []


def test_normalize_cleans_each_alternative():
    """Test that every alternative of a pipe-separated key is stripped and lowercased."""
    result = normalize_mime_set({" JPG | .jpeg || ": ["image/jpeg", "image/pjpeg"]})
    assert result == {"jpg|jpeg": ["image/jpeg", "image/pjpeg"]}


def test_lookup_with_spaced_alternation_key():
    """Test lookup against a raw key with spaces around the alternatives."""
    registry = {"jpg | jpeg": ["image/jpeg", "image/pjpeg"]}

    assert lookup_mimes(registry, "jpeg") == ["image/jpeg", "image/pjpeg"]
    assert lookup_mimes(registry, "jpg") == ["image/jpeg", "image/pjpeg"]


def test_empty_registry_returns_empty_set():
    """Test that a registry without filters yields an empty set."""
    registry = MimeRegistry()
    assert registry.has_filters() is False
    assert registry.get_additional_mimes() == {}


def test_filters_run_in_priority_order():
    """Test that lower priorities run first and later filters see earlier output."""
    registry = MimeRegistry()
    seen = []

    def late(mimes, context):
        seen.append(("late", dict(mimes)))
        return {**mimes, "dwg": ["image/vnd.dwg"]}

    def early(mimes, context):
        seen.append(("early", dict(mimes)))
        return {**mimes, "dwg": "application/acad", "json": "application/json"}

    registry.add_filter(late, priority=20)
    registry.add_filter(early, priority=5)

    result = registry.get_additional_mimes()

    assert [name for name, _ in seen] == ["early", "late"]
    assert seen[1][1]["dwg"] == "application/acad"
    assert result == {"dwg": ["image/vnd.dwg"], "json": ["application/json"]}


def test_context_is_passed_through_and_not_cached():
    """Test that callbacks are re-run per call with the given context."""
    registry = MimeRegistry()
    calls = []

    def per_actor(mimes, context):
        calls.append(context)
        if context == "admin":
            return {"svg": "image/svg+xml"}
        return {}

    registry.add_filter(per_actor)

    assert registry.get_additional_mimes("admin") == {"svg": ["image/svg+xml"]}
    assert registry.get_additional_mimes(None) == {}
    assert calls == ["admin", None]


def test_non_mapping_filter_result_is_ignored():
    """Test that a callback returning garbage keeps the previous mappings."""
    registry = MimeRegistry()
    registry.add_filter(lambda mimes, context: {"json": "application/json"}, priority=1)
    registry.add_filter(lambda mimes, context: None, priority=2)

    assert registry.get_additional_mimes() == {"json": ["application/json"]}


def test_remove_filter():
    """Test unregistering a callback."""
    registry = MimeRegistry()

    def add_json(mimes, context):
        return {**mimes, "json": "application/json"}

    registry.add_filter(add_json)
    assert registry.remove_filter(add_json) is True
    assert registry.remove_filter(add_json) is False
    assert registry.get_additional_mimes() == {}


def test_settings_mime_filter_merges_setting(monkeypatch):
    """Test that the ADDITIONAL_MIMES setting is merged into the chain."""
    from multimime.core.config import settings

    monkeypatch.setattr(settings, "ADDITIONAL_MIMES", {"dwg": ["application/acad", "image/vnd.dwg"]})

    result = settings_mime_filter({"json": "application/json"})

    assert result == {
        "json": "application/json",
        "dwg": ["application/acad", "image/vnd.dwg"],
    }
