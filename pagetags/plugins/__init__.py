"""Plugin system for host hook dispatch.

This package provides a plugin architecture for extending the content host:
plugins are discovered, enabled/disabled, and called at fixed points of a
render cycle.

Usage:
    from pagetags.plugins import PluginRegistry

    registry = PluginRegistry()
    registry.discover()

    # List available plugins
    print(registry.list_available())  # ['tags']

    # Enable specific plugins
    registry.enable('tags', config={'auto_filter': True})

    # Dispatch hooks
    headers = registry.collect_meta_headers()
    pages = registry.dispatch_pages_loaded(pages, current_page)

    # Disable when done
    registry.disable_all()
"""

from .base import HostPlugin
from .registry import PluginRegistry

__all__ = ['HostPlugin', 'PluginRegistry']
