"""Exception types raised across component boundaries."""

from __future__ import annotations


class PatchwatchError(Exception):
    """Base class for all patchwatch errors."""


class FetchError(PatchwatchError):
    """The remote changelog source could not be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class QueryError(PatchwatchError):
    """The store could not serve a read request."""


__all__ = ["FetchError", "PatchwatchError", "QueryError"]
