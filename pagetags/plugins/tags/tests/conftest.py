"""Pytest fixtures for tags plugin tests."""

import pytest

from ..plugin import TagsPlugin


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep PAGETAGS_* variables from the outer environment out of the tests."""
    for name in ("PAGETAGS_CONFIG", "PAGETAGS_DELIMITER",
                 "PAGETAGS_AUTO_FILTER", "PAGETAGS_COLLECT_ALL_TAGS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def plugin():
    plugin = TagsPlugin()
    plugin.initialize()
    yield plugin
    plugin.shutdown()


@pytest.fixture
def site_pages():
    """Pages as the host hands them over after meta parsing."""
    return [
        {"id": "index", "meta": {"tags": [], "filter": []}},
        {"id": "blog", "meta": {"tags": [], "filter": ["news", "release"]}},
        {"id": "post-1", "meta": {"tags": ["news"], "filter": []}},
        {"id": "post-2", "meta": {"tags": ["recipes", "dinner"], "filter": []}},
        {"id": "post-3", "meta": {"tags": ["release", "news"], "filter": []}},
    ]
