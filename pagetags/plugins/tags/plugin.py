# pagetags/plugins/tags/plugin.py

"""Tags plugin: "Tags" and "Filter" meta headers plus tag based page filtering.

A page lists its own tags in the "Tags" header and, optionally, the tags it
wants to see in the "Filter" header. Templates narrow a page list with the
``apply_tag_filter`` filter: on a page with "Filter: foo, bar",
``pages|apply_tag_filter`` keeps only pages tagged foo or bar, and on a page
without the header it is a no-op. ``get_all_tags()`` lists every tag used on
the site.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

import jinja2

from ..base import Page
from .config import TagsConfig
from .parsing import TagAccumulator, filter_by_tags, page_tags, parse_tags

logger = logging.getLogger(__name__)


class TagsPlugin:
    """Plugin that parses tag headers and filters pages by tag."""

    @property
    def name(self) -> str:
        """Unique identifier for this plugin."""
        return "tags"

    def __init__(self):
        self.config = TagsConfig()
        self._current_page: Optional[Page] = None
        self._all_tags = TagAccumulator()

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Called by registry with configuration.

        Args:
            config: Dict of TagsConfig fields, or None for defaults.

        Raises:
            ConfigError: If the config is invalid.
        """
        self.config = TagsConfig.from_dict(config)
        self._all_tags = TagAccumulator(delimiter=self.config.delimiter)
        self._current_page = None

    def shutdown(self) -> None:
        """Forget the current page and the collected tags."""
        self._current_page = None
        self._all_tags.reset()

    # ==================== Host Hooks ====================

    def on_meta_headers(self, headers: Dict[str, str]) -> None:
        headers["tags"] = self.config.tags_header
        headers["filter"] = self.config.filter_header

    def on_meta_parsed(self, meta: Dict[str, Any]) -> None:
        """Replace the raw tags and filter strings with tag lists."""
        meta["tags"] = parse_tags(meta.get("tags"), self.config.delimiter)
        meta["filter"] = parse_tags(meta.get("filter"), self.config.delimiter)

    def on_pages_loaded(
        self,
        pages: List[Page],
        current_page: Optional[Page],
        previous_page: Optional[Page],
        next_page: Optional[Page],
    ) -> List[Page]:
        """Remember the current page and collect the tags of this cycle.

        With ``auto_filter`` set, the returned collection is already narrowed
        to the current page's filter.
        """
        self._current_page = current_page

        self._all_tags.reset()
        if self.config.collect_all_tags:
            self._all_tags.add_pages(pages)
            logger.debug("Collected %d distinct tags from %d pages",
                         len(self._all_tags), len(pages))

        if self.config.auto_filter:
            return self.apply_tag_filter(pages)
        return pages

    def on_template_registration(self, env: jinja2.Environment) -> None:
        env.filters[self.config.filter_name] = self.apply_tag_filter
        if self.config.collect_all_tags:
            env.globals[self.config.all_tags_function] = self.get_all_tags

    # ==================== Template API ====================

    def current_filter(self) -> List[str]:
        """Tags the current page filters by, empty without a current page."""
        return page_tags(self._current_page, "filter", self.config.delimiter)

    def apply_tag_filter(
        self,
        pages: Iterable[Page],
        filter_tags: Union[Iterable[str], str, None] = None,
    ) -> List[Page]:
        """
        Filter pages to those matching a tag filter.

        Args:
            pages: Pages to filter.
            filter_tags: Explicit filter as a tag list or delimited string.
                Defaults to the current page's Filter header.

        Returns:
            The matching pages in their original order, or ``pages`` itself
            when there is nothing to filter by.
        """
        if filter_tags is None:
            filter_tags = self.current_filter()
        if not isinstance(pages, (list, tuple)):
            pages = list(pages)
        return filter_by_tags(pages, filter_tags, delimiter=self.config.delimiter)

    def get_all_tags(self) -> List[str]:
        """All distinct tags seen when pages were last loaded."""
        return self._all_tags.snapshot()


def create_plugin() -> TagsPlugin:
    """Factory function for plugin discovery."""
    return TagsPlugin()
