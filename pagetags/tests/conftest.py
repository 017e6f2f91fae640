"""Pytest fixtures for content host and CLI tests."""

import textwrap

import pytest

from pagetags.plugins import PluginRegistry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PAGETAGS_CONFIG", "PAGETAGS_DELIMITER",
                 "PAGETAGS_AUTO_FILTER", "PAGETAGS_COLLECT_ALL_TAGS"):
        monkeypatch.delenv(name, raising=False)


def write_page(directory, name, text):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
    return path


@pytest.fixture
def content_dir(tmp_path):
    """A small site: a blog index filtering by news, and three posts."""
    content = tmp_path / "content"
    write_page(content, "index.md", """
        ---
        Title: Home
        ---
        Welcome
        """)
    write_page(content, "blog.md", """
        ---
        Title: Blog
        Filter: news, release
        ---
        Latest posts
        """)
    write_page(content, "posts/dinner.md", """
        ---
        Title: Dinner
        Tags: recipes, dinner
        ---
        Soup
        """)
    write_page(content, "posts/launch.md", """
        ---
        Title: Launch
        tags: release, news
        ---
        Version 1
        """)
    write_page(content, "posts/update.md", """
        ---
        Title: Update
        Tags: news
        ---
        Small fixes
        """)
    return content


@pytest.fixture
def registry():
    registry = PluginRegistry()
    registry.discover()
    registry.enable("tags")
    yield registry
    registry.disable_all()
