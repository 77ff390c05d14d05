"""RSSHub Model Context Protocol server."""

__version__ = "0.2.0"
