"""Web layer serving RSS/JSON feeds and webhooks."""

from .server import create_app

__all__ = ["create_app"]
