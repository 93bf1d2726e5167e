"""Infra layer utilities (storage, locking)."""

from .locking import ExclusiveSection
from .storage import SQLiteManager

__all__ = ["ExclusiveSection", "SQLiteManager"]
