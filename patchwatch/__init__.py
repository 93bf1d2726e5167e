"""Patch changelog watcher: scrape, dedupe, notify and re-publish patches."""

__version__ = "0.1.0"
