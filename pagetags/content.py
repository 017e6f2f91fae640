"""Minimal content host driving plugins through one render cycle.

Pages are Markdown files with an optional leading meta block:

    ---
    Title: Cooking with tags
    Tags: recipes, dinner
    ---
    Page body...

The host maps raw header names to internal field names using the headers
plugins registered, hands each page's meta to the plugins, then lets them
see (and narrow) the full page collection before rendering.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import jinja2
import yaml

from .plugins import PluginRegistry

logger = logging.getLogger(__name__)

META_FENCE = "---"
PAGE_SUFFIX = ".md"


class PageNotFoundError(KeyError):
    """Raised when a render cycle is asked for a page id that was not loaded."""

    def __init__(self, page_id: str):
        super().__init__(page_id)
        self.page_id = page_id


@dataclass
class RenderResult:
    """Outcome of one render cycle.

    Attributes:
        pages: Page collection after every plugin's pages-loaded hook.
        all_pages: Every loaded page, in load order.
        current_page: The page being rendered, if one was requested.
        previous_page: Page loaded before the current one.
        next_page: Page loaded after the current one.
    """
    pages: List[Dict[str, Any]]
    all_pages: List[Dict[str, Any]] = field(default_factory=list)
    current_page: Optional[Dict[str, Any]] = None
    previous_page: Optional[Dict[str, Any]] = None
    next_page: Optional[Dict[str, Any]] = None


def parse_meta_block(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a leading ``---`` fenced YAML block from the page body.

    Returns:
        Tuple of (raw meta mapping, body). Text without a meta block yields
        an empty mapping and the whole text as body.

    Raises:
        yaml.YAMLError: If the meta block is not valid YAML.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != META_FENCE:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].strip() == META_FENCE:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            # BaseLoader keeps every scalar as the author wrote it ("on", "010")
            data = yaml.load(block, Loader=yaml.BaseLoader) if block.strip() else None
            if not isinstance(data, dict):
                return {}, body
            return data, body

    # Unterminated block: treat everything as body
    return {}, text


def _meta_value(value: Any, delimiter: str) -> Any:
    """Keep header values as raw strings, the way a plain meta parser would."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return delimiter.join(str(item) for item in value)
    return str(value)


def map_headers(raw_meta: Dict[str, Any], headers: Dict[str, str],
                delimiter: str = ",") -> Dict[str, Any]:
    """Rename raw header keys to internal field names.

    Matching is case-insensitive. Keys no plugin registered keep their own
    name, lowercased.
    """
    by_raw_name = {raw.lower(): field_name for field_name, raw in headers.items()}
    meta: Dict[str, Any] = {}
    for key, value in raw_meta.items():
        key = str(key)
        meta[by_raw_name.get(key.lower(), key.lower())] = _meta_value(value, delimiter)
    return meta


class Site:
    """A directory of pages rendered through a plugin registry."""

    def __init__(self, content_dir: Union[str, Path], registry: PluginRegistry,
                 delimiter: str = ","):
        self.content_dir = Path(content_dir)
        self.registry = registry
        self.delimiter = delimiter

    def page_files(self) -> List[Path]:
        if not self.content_dir.is_dir():
            raise FileNotFoundError(f"Content directory not found: {self.content_dir}")
        return sorted(self.content_dir.rglob(f"*{PAGE_SUFFIX}"))

    def page_id(self, path: Path) -> str:
        return path.relative_to(self.content_dir).with_suffix("").as_posix()

    def load_page(self, path: Path, headers: Dict[str, str]) -> Dict[str, Any]:
        """Read one page file and run the meta-parsed hook on its meta.

        Unreadable files and malformed meta blocks are logged and the page
        is loaded with empty meta.
        """
        try:
            raw_meta, body = parse_meta_block(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read page %s: %s", path, e)
            raw_meta, body = {}, ""
        except yaml.YAMLError as e:
            logger.warning("Invalid meta block in %s: %s", path, e)
            raw_meta, body = {}, ""

        meta = map_headers(raw_meta, headers, self.delimiter)
        self.registry.dispatch_meta_parsed(meta)

        page_id = self.page_id(path)
        logger.debug("Loaded page %s with meta keys %s", page_id, sorted(meta))
        return {"id": page_id, "meta": meta, "content": body}

    def load_pages(self, headers: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        if headers is None:
            headers = self.registry.collect_meta_headers()
        return [self.load_page(path, headers) for path in self.page_files()]

    def render_cycle(self, current_id: Optional[str] = None) -> RenderResult:
        """Load every page and pass the collection through the plugins.

        Args:
            current_id: Id of the page being rendered (its path relative to
                the content directory, without suffix).

        Raises:
            PageNotFoundError: If ``current_id`` names no loaded page.
        """
        headers = self.registry.collect_meta_headers()
        all_pages = self.load_pages(headers)

        current = previous = following = None
        if current_id is not None:
            ids = [page["id"] for page in all_pages]
            if current_id not in ids:
                raise PageNotFoundError(current_id)
            index = ids.index(current_id)
            current = all_pages[index]
            previous = all_pages[index - 1] if index > 0 else None
            following = all_pages[index + 1] if index + 1 < len(all_pages) else None

        pages = self.registry.dispatch_pages_loaded(list(all_pages), current, previous, following)
        logger.info("Render cycle: %d of %d pages after plugins", len(pages), len(all_pages))
        return RenderResult(
            pages=pages,
            all_pages=all_pages,
            current_page=current,
            previous_page=previous,
            next_page=following,
        )

    def template_environment(self, template_dir: Optional[Union[str, Path]] = None) -> jinja2.Environment:
        """Create the template environment and let plugins register on it."""
        loader = jinja2.FileSystemLoader(str(template_dir)) if template_dir else None
        env = jinja2.Environment(loader=loader, autoescape=False)
        return self.registry.dispatch_template_registration(env)

    def render(self, template_path: Union[str, Path], current_id: Optional[str] = None) -> str:
        """Run a render cycle and render ``template_path`` with its result."""
        template_path = Path(template_path)
        result = self.render_cycle(current_id)
        env = self.template_environment(template_path.parent)
        template = env.get_template(template_path.name)
        return template.render(
            pages=result.pages,
            current_page=result.current_page,
            previous_page=result.previous_page,
            next_page=result.next_page,
        )
