"""Shared fixtures for importer tests."""

import pytest

from fm_importer.config import settings
from fm_importer.core.asset_resolver import InMemoryAssetResolver
from fm_importer.core.graph_sink import InMemoryGraphSink


@pytest.fixture(autouse=True)
def restore_feature_flags():
    """Feature flags are module state; put them back after every test."""
    saved = settings.get_all_flags()
    yield
    settings.FEATURE_FLAGS.clear()
    settings.FEATURE_FLAGS.update(saved)


@pytest.fixture
def sink():
    """Fresh in-memory host graph."""
    return InMemoryGraphSink("test-project")


@pytest.fixture
def resolver():
    """Empty in-memory asset resolver."""
    return InMemoryAssetResolver()
