"""Command line interface for inspecting tagged content.

Examples:
  # List every tag used in a content directory
  pagetags tags content/

  # Pages shown on the "blog" page, narrowed by its Filter header
  pagetags pages content/ --page blog

  # Pages tagged recipes or dinner
  pagetags pages content/ --filter "recipes, dinner"

  # Render a Jinja2 template as the "blog" page would
  pagetags render content/ templates/index.html --page blog
"""

import argparse
import logging
import sys
from typing import List, Optional

import jinja2
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .content import PageNotFoundError, Site
from .plugins import PluginRegistry
from .plugins.tags import ConfigError, TagsConfig, load_config
from .plugins.tags.parsing import page_tags

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagetags",
        description="Tag based filtering of page collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n\n", 1)[1],
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Tags config file, JSON or YAML (default: $PAGETAGS_CONFIG)",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    tags_cmd = subparsers.add_parser("tags", help="List all tags used by the pages")
    tags_cmd.add_argument("content_dir", help="Directory of page files")

    pages_cmd = subparsers.add_parser("pages", help="List pages matching a tag filter")
    pages_cmd.add_argument("content_dir", help="Directory of page files")
    pages_cmd.add_argument("--page", metavar="ID", help="Page whose Filter header applies")
    pages_cmd.add_argument("--filter", metavar="TAGS", help="Explicit comma-separated filter")

    render_cmd = subparsers.add_parser("render", help="Render a template for a page")
    render_cmd.add_argument("content_dir", help="Directory of page files")
    render_cmd.add_argument("template", help="Jinja2 template file")
    render_cmd.add_argument("--page", metavar="ID", help="Page being rendered")

    return parser


def build_site(content_dir: str, config: TagsConfig) -> Site:
    """Discover plugins, enable the tags plugin with ``config``, and wrap the content."""
    registry = PluginRegistry()
    registry.discover()
    registry.enable("tags", config=config.to_dict())
    logger.debug("Enabled plugins: %s", registry.list_enabled())
    return Site(content_dir, registry, delimiter=config.delimiter)


def _cmd_tags(site: Site, args: argparse.Namespace) -> int:
    site.render_cycle()
    plugin = site.registry.get_plugin("tags")
    tags = plugin.get_all_tags()

    table = Table(title="Tags")
    table.add_column("Tag", style="cyan")
    for tag in tags:
        table.add_row(escape(tag))
    console.print(table)
    return 0


def _cmd_pages(site: Site, args: argparse.Namespace) -> int:
    result = site.render_cycle(args.page)
    plugin = site.registry.get_plugin("tags")
    pages = plugin.apply_tag_filter(result.pages, args.filter)

    table = Table(title="Pages")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Tags", style="green")
    for page in pages:
        meta = page.get("meta", {})
        table.add_row(
            escape(page["id"]),
            escape(str(meta.get("title") or "")),
            escape(", ".join(page_tags(page, delimiter=site.delimiter))),
        )
    console.print(table)
    return 0


def _cmd_render(site: Site, args: argparse.Namespace) -> int:
    print(site.render(args.template, args.page))
    return 0


COMMANDS = {
    "tags": _cmd_tags,
    "pages": _cmd_pages,
    "render": _cmd_render,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    load_dotenv(args.env_file)

    try:
        config = load_config(args.config)
        site = build_site(args.content_dir, config)
        return COMMANDS[args.command](site, args)
    except ConfigError as e:
        err_console.print(f"[red]Config error:[/red] {escape(str(e))}")
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
    except PageNotFoundError as e:
        err_console.print(f"[red]Error:[/red] unknown page '{escape(e.page_id)}'")
    except jinja2.TemplateNotFound as e:
        err_console.print(f"[red]Error:[/red] template not found: {escape(str(e))}")
    except jinja2.TemplateError as e:
        err_console.print(f"[red]Template error:[/red] {escape(str(e))}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
