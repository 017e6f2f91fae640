# pagetags/plugins/tags/__init__.py

"""Tags plugin for filtering page collections by tag.

This plugin registers the "Tags" and "Filter" meta headers, parses them into
tag lists, and exposes the `apply_tag_filter` template filter and the
`get_all_tags` template function.
"""

from .config import ConfigError, TagsConfig, load_config
from .parsing import TagAccumulator, collect_all_tags, filter_by_tags, parse_tags
from .plugin import TagsPlugin, create_plugin

__all__ = [
    "ConfigError",
    "TagAccumulator",
    "TagsConfig",
    "TagsPlugin",
    "collect_all_tags",
    "create_plugin",
    "filter_by_tags",
    "load_config",
    "parse_tags",
]
