"""Pytest configuration and shared fixtures."""

import pytest

from multimime.plugin import MultiMimeUploads
from multimime.registry import MimeRegistry


DWG_MIMES = {"dwg": ["application/acad", "image/vnd.dwg"]}


@pytest.fixture
def dwg_registry():
    """Registry contributing the two DWG MIME types."""
    registry = MimeRegistry()
    registry.add_filter(lambda mimes, context: {**mimes, **DWG_MIMES})
    return registry


@pytest.fixture
def uploads(dwg_registry):
    """Uploads wiring over a small base allow-list."""
    return MultiMimeUploads(
        registry=dwg_registry,
        base_table={
            "pdf": "application/pdf",
            "jpg|jpeg|jpe": "image/jpeg",
            "json": "text/plain",
        },
    )
