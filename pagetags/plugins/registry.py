"""Plugin registry for discovering, loading, and dispatching host plugins."""

import importlib
import logging
import pkgutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import jinja2

from .base import HostPlugin, Page

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Manages plugin discovery, lifecycle, and hook dispatch.

    Usage:
        registry = PluginRegistry()
        registry.discover()

        print(registry.list_available())  # ['tags', ...]

        registry.enable('tags', config={'auto_filter': True})

        # Drive one render cycle
        headers = registry.collect_meta_headers()
        registry.dispatch_meta_parsed(meta)
        pages = registry.dispatch_pages_loaded(pages, current_page)
        registry.dispatch_template_registration(env)

        registry.disable_all()

    Hooks are dispatched to enabled plugins in the order they were enabled.
    A plugin raising from a hook is logged and skipped for that hook only.
    """

    def __init__(self):
        self._plugins: Dict[str, HostPlugin] = {}
        # dict as an ordered set: dispatch follows enable order
        self._enabled: Dict[str, None] = {}
        self._configs: Dict[str, Dict[str, Any]] = {}

    def discover(self, plugin_dir: Optional[Path] = None) -> List[str]:
        """Register every plugin package found next to this module.

        Each package exporting `create_plugin()` is imported and its plugin
        registered, not yet enabled. A package that fails to import or whose
        factory raises is logged and skipped; the others still load.

        Args:
            plugin_dir: Directory to scan instead of this package's own.

        Returns:
            Names of the plugins registered by this scan.
        """
        if plugin_dir is None:
            plugin_dir = Path(__file__).parent

        discovered = []

        for finder, name, ispkg in pkgutil.iter_modules([str(plugin_dir)]):
            # Skip internal modules
            if name.startswith('_') or name in ('base', 'registry', 'tests'):
                continue

            try:
                module = importlib.import_module(f".{name}", package=__package__)

                if not hasattr(module, 'create_plugin'):
                    logger.debug("%s: no create_plugin() function found", name)
                    continue

                plugin = module.create_plugin()
            except Exception as exc:
                logger.warning("Error loading plugin '%s': %s", name, exc)
                continue

            if self.register(plugin):
                discovered.append(plugin.name)

        return discovered

    def register(self, plugin: Any) -> bool:
        """Add an already constructed plugin to the registry.

        Returns:
            True if the plugin implements HostPlugin and was registered.
        """
        if not isinstance(plugin, HostPlugin):
            logger.warning("%r does not implement the HostPlugin protocol", plugin)
            return False
        self._plugins[plugin.name] = plugin
        return True

    def list_available(self) -> List[str]:
        """Names of all registered plugins, enabled or not."""
        return list(self._plugins.keys())

    def list_enabled(self) -> List[str]:
        """List currently enabled plugin names, in dispatch order."""
        return list(self._enabled)

    def is_enabled(self, name: str) -> bool:
        """Check if a plugin is currently enabled."""
        return name in self._enabled

    def get_plugin(self, name: str) -> Optional[HostPlugin]:
        """Get a plugin by name, or None if not found."""
        return self._plugins.get(name)

    def enable(self, name: str, config: Optional[Dict[str, Any]] = None) -> None:
        """Add a plugin to the hook dispatch order.

        A plugin joins the end of the dispatch order the first time it is
        enabled. Enabling it again with a different config re-runs its
        initialize() in place, keeping its position; the same or no config
        leaves it untouched.

        Args:
            name: Registered plugin name.
            config: Settings handed to the plugin's initialize().

        Raises:
            ValueError: If the plugin is not found.
        """
        if name not in self._plugins:
            raise ValueError(f"Plugin '{name}' not found. Available: {self.list_available()}")

        plugin = self._plugins[name]

        if name not in self._enabled:
            plugin.initialize(config)
            if config:
                self._configs[name] = config
            self._enabled[name] = None
            logger.debug("Enabled plugin '%s'", name)
        elif config and config != self._configs.get(name):
            # Re-initialize with new config
            plugin.shutdown()
            plugin.initialize(config)
            self._configs[name] = config
            logger.debug("Re-initialized plugin '%s' with new config", name)

    def disable(self, name: str) -> None:
        """Remove a plugin from hook dispatch and call its shutdown().

        Per-cycle state the plugin holds (current page, collected tags) is
        dropped by shutdown(). Disabling a plugin that is not enabled does
        nothing.
        """
        if name in self._enabled:
            self._plugins[name].shutdown()
            del self._enabled[name]
            self._configs.pop(name, None)
            logger.debug("Disabled plugin '%s'", name)

    def enable_all(self, config: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        """Enable every registered plugin, in registration order.

        Args:
            config: Per-plugin settings keyed by plugin name; plugins
                without an entry are initialized with defaults.
        """
        config = config or {}
        for name in self._plugins:
            self.enable(name, config.get(name))

    def disable_all(self) -> None:
        """Shut down every enabled plugin, emptying the dispatch order."""
        for name in list(self._enabled):
            self.disable(name)

    def _enabled_plugins(self):
        for name in list(self._enabled):
            yield name, self._plugins[name]

    def collect_meta_headers(self) -> Dict[str, str]:
        """Ask every enabled plugin for its meta headers.

        Returns:
            Mapping of internal field name to raw header name.
        """
        headers: Dict[str, str] = {}
        for name, plugin in self._enabled_plugins():
            try:
                plugin.on_meta_headers(headers)
            except Exception as exc:
                logger.warning("Plugin '%s' failed in on_meta_headers: %s", name, exc)
        return headers

    def dispatch_meta_parsed(self, meta: Dict[str, Any]) -> Dict[str, Any]:
        """Let every enabled plugin adjust one page's parsed meta."""
        for name, plugin in self._enabled_plugins():
            try:
                plugin.on_meta_parsed(meta)
            except Exception as exc:
                logger.warning("Plugin '%s' failed in on_meta_parsed: %s", name, exc)
        return meta

    def dispatch_pages_loaded(
        self,
        pages: List[Page],
        current_page: Optional[Page] = None,
        previous_page: Optional[Page] = None,
        next_page: Optional[Page] = None,
    ) -> List[Page]:
        """Pass the page collection through every enabled plugin.

        Each plugin receives the collection returned by the previous one.
        """
        for name, plugin in self._enabled_plugins():
            try:
                result = plugin.on_pages_loaded(pages, current_page, previous_page, next_page)
            except Exception as exc:
                logger.warning("Plugin '%s' failed in on_pages_loaded: %s", name, exc)
                continue
            if result is not None:
                pages = result
        return pages

    def dispatch_template_registration(self, env: jinja2.Environment) -> jinja2.Environment:
        """Let every enabled plugin register on the template environment."""
        for name, plugin in self._enabled_plugins():
            try:
                plugin.on_template_registration(env)
            except Exception as exc:
                logger.warning("Plugin '%s' failed in on_template_registration: %s", name, exc)
        return env
