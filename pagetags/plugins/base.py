"""Base protocol for host plugins."""

from typing import Any, Dict, List, MutableMapping, Optional, Protocol, runtime_checkable

import jinja2

Page = MutableMapping[str, Any]


@runtime_checkable
class HostPlugin(Protocol):
    """Interface that all host plugins must implement.

    The host calls the hook methods at fixed points of a render cycle, in
    this order:

    1. on_meta_headers: before any metadata is parsed, so plugins can
       declare which raw header names map to which internal fields.
    2. on_meta_parsed: once per page, after its meta block was parsed.
    3. on_pages_loaded: after every page is loaded, before rendering.
    4. on_template_registration: when the template engine is created.

    Plugins that have nothing to do at a hook still implement it as a no-op.
    """

    @property
    def name(self) -> str:
        """Unique identifier for this plugin."""
        ...

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Called once when the plugin is enabled.

        Args:
            config: Optional configuration dict for plugin-specific settings.
        """
        ...

    def shutdown(self) -> None:
        """Called when the plugin is disabled. Clean up resources here."""
        ...

    def on_meta_headers(self, headers: Dict[str, str]) -> None:
        """Register meta headers as ``headers[field] = "Raw Header Name"``."""
        ...

    def on_meta_parsed(self, meta: Dict[str, Any]) -> None:
        """Adjust a single page's parsed meta in place."""
        ...

    def on_pages_loaded(
        self,
        pages: List[Page],
        current_page: Optional[Page],
        previous_page: Optional[Page],
        next_page: Optional[Page],
    ) -> List[Page]:
        """Inspect the loaded pages and return the collection to render.

        Returning ``pages`` unchanged is the common case. A plugin narrowing
        the collection returns a new list and leaves ``pages`` untouched.
        """
        ...

    def on_template_registration(self, env: jinja2.Environment) -> None:
        """Register filters, functions or globals on the template environment."""
        ...

