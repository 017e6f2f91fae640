"""Tests for the tags plugin hooks and template API."""

import jinja2
import pytest

from ..config import ConfigError
from ..plugin import TagsPlugin, create_plugin


def _by_id(pages, page_id):
    return next(p for p in pages if p["id"] == page_id)


class TestTagsPluginInitialization:
    """Tests for plugin initialization."""

    def test_plugin_name(self):
        assert TagsPlugin().name == "tags"

    def test_create_plugin(self):
        assert isinstance(create_plugin(), TagsPlugin)

    def test_initialize_without_config(self):
        plugin = TagsPlugin()
        plugin.initialize()
        assert plugin.config.tags_header == "Tags"
        assert plugin.config.auto_filter is False

    def test_initialize_with_config(self):
        plugin = TagsPlugin()
        plugin.initialize({"tags_header": "Keywords", "auto_filter": True})
        assert plugin.config.tags_header == "Keywords"
        assert plugin.config.auto_filter is True

    def test_initialize_rejects_bad_config(self):
        plugin = TagsPlugin()
        with pytest.raises(ConfigError):
            plugin.initialize({"delimiter": ""})

    def test_shutdown_clears_state(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, _by_id(site_pages, "blog"), None, None)
        assert plugin.get_all_tags()

        plugin.shutdown()

        assert plugin.get_all_tags() == []
        assert plugin.current_filter() == []


class TestMetaHooks:
    """Tests for header registration and meta parsing."""

    def test_registers_headers(self, plugin):
        headers = {"title": "Title"}
        plugin.on_meta_headers(headers)
        assert headers == {"title": "Title", "tags": "Tags", "filter": "Filter"}

    def test_registers_configured_headers(self):
        plugin = TagsPlugin()
        plugin.initialize({"tags_header": "Keywords", "filter_header": "Show"})
        headers = {}
        plugin.on_meta_headers(headers)
        assert headers == {"tags": "Keywords", "filter": "Show"}

    def test_meta_parsed_replaces_strings(self, plugin):
        meta = {"title": "Post", "tags": " news , release", "filter": "a,,b"}
        plugin.on_meta_parsed(meta)
        assert meta == {"title": "Post", "tags": ["news", "release"], "filter": ["a", "", "b"]}

    def test_meta_parsed_missing_fields(self, plugin):
        meta = {"title": "Post"}
        plugin.on_meta_parsed(meta)
        assert meta["tags"] == []
        assert meta["filter"] == []

    def test_meta_parsed_non_string(self, plugin):
        meta = {"tags": 12, "filter": None}
        plugin.on_meta_parsed(meta)
        assert meta["tags"] == []
        assert meta["filter"] == []

    def test_meta_parsed_uses_delimiter(self):
        plugin = TagsPlugin()
        plugin.initialize({"delimiter": ";"})
        meta = {"tags": "a; b, c"}
        plugin.on_meta_parsed(meta)
        assert meta["tags"] == ["a", "b, c"]


class TestPagesLoaded:
    """Tests for the pages-loaded hook."""

    def test_returns_pages_unchanged_by_default(self, plugin, site_pages):
        result = plugin.on_pages_loaded(site_pages, _by_id(site_pages, "blog"), None, None)
        assert result is site_pages

    def test_collects_all_tags(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, None, None, None)
        assert plugin.get_all_tags() == ["news", "recipes", "dinner", "release"]

    def test_accumulator_reset_each_cycle(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, None, None, None)
        plugin.on_pages_loaded([{"id": "x", "meta": {"tags": ["solo"]}}], None, None, None)
        assert plugin.get_all_tags() == ["solo"]

    def test_collect_disabled(self, site_pages):
        plugin = TagsPlugin()
        plugin.initialize({"collect_all_tags": False})
        plugin.on_pages_loaded(site_pages, None, None, None)
        assert plugin.get_all_tags() == []

    def test_auto_filter(self, site_pages):
        plugin = TagsPlugin()
        plugin.initialize({"auto_filter": True})
        result = plugin.on_pages_loaded(site_pages, _by_id(site_pages, "blog"), None, None)
        assert [p["id"] for p in result] == ["post-1", "post-3"]
        assert len(site_pages) == 5

    def test_auto_filter_without_filter_header(self, site_pages):
        plugin = TagsPlugin()
        plugin.initialize({"auto_filter": True})
        result = plugin.on_pages_loaded(site_pages, _by_id(site_pages, "index"), None, None)
        assert result is site_pages


class TestApplyTagFilter:
    """Tests for the template filter callable."""

    def test_uses_current_page_filter(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, _by_id(site_pages, "blog"), None, None)
        result = plugin.apply_tag_filter(site_pages)
        assert [p["id"] for p in result] == ["post-1", "post-3"]

    def test_no_op_without_filter(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, _by_id(site_pages, "index"), None, None)
        assert plugin.apply_tag_filter(site_pages) is site_pages

    def test_no_op_without_current_page(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, None, None, None)
        assert plugin.apply_tag_filter(site_pages) is site_pages

    def test_explicit_filter_list(self, plugin, site_pages):
        result = plugin.apply_tag_filter(site_pages, ["dinner"])
        assert [p["id"] for p in result] == ["post-2"]

    def test_explicit_filter_string(self, plugin, site_pages):
        result = plugin.apply_tag_filter(site_pages, "dinner, release")
        assert [p["id"] for p in result] == ["post-2", "post-3"]

    def test_accepts_iterables(self, plugin, site_pages):
        result = plugin.apply_tag_filter(iter(site_pages), ["news"])
        assert [p["id"] for p in result] == ["post-1", "post-3"]

    def test_current_page_with_raw_filter_string(self, plugin):
        pages = [{"id": "a", "meta": {"tags": "x"}}, {"id": "b", "meta": {"tags": "y"}}]
        current = {"id": "list", "meta": {"filter": "y"}}
        plugin.on_pages_loaded(pages, current, None, None)
        assert plugin.apply_tag_filter(pages) == [pages[1]]


class TestTemplateRegistration:
    """Tests for Jinja2 registration."""

    def test_registers_filter_and_function(self, plugin):
        env = jinja2.Environment()
        plugin.on_template_registration(env)
        assert "apply_tag_filter" in env.filters
        assert "get_all_tags" in env.globals

    def test_configured_names(self):
        plugin = TagsPlugin()
        plugin.initialize({"filter_name": "tagged", "all_tags_function": "site_tags"})
        env = jinja2.Environment()
        plugin.on_template_registration(env)
        assert "tagged" in env.filters
        assert "site_tags" in env.globals

    def test_no_function_when_collect_disabled(self):
        plugin = TagsPlugin()
        plugin.initialize({"collect_all_tags": False})
        env = jinja2.Environment()
        plugin.on_template_registration(env)
        assert "apply_tag_filter" in env.filters
        assert "get_all_tags" not in env.globals

    def test_render_with_filter(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, _by_id(site_pages, "blog"), None, None)
        env = jinja2.Environment()
        plugin.on_template_registration(env)

        template = env.from_string(
            "{% for p in pages|apply_tag_filter %}{{ p.id }} {% endfor %}"
        )
        assert template.render(pages=site_pages) == "post-1 post-3 "

    def test_render_with_explicit_filter_argument(self, plugin, site_pages):
        env = jinja2.Environment()
        plugin.on_template_registration(env)

        template = env.from_string(
            "{{ (pages|apply_tag_filter(['recipes']))|map(attribute='id')|join(',') }}"
        )
        assert template.render(pages=site_pages) == "post-2"

    def test_render_all_tags(self, plugin, site_pages):
        plugin.on_pages_loaded(site_pages, None, None, None)
        env = jinja2.Environment()
        plugin.on_template_registration(env)

        template = env.from_string("{{ get_all_tags()|sort|join(' ') }}")
        assert template.render() == "dinner news recipes release"
