"""Tags and Filter meta headers for content pages, with tag based page filtering."""

__version__ = "1.0.0"
