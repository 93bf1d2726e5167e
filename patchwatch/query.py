"""Read-side facade serving recent patches to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .engine import PatchRecord, PatchStore, coerce_limit
from .infra import ExclusiveSection


@dataclass(slots=True, frozen=True)
class FeedItem:
    """Projection of a stored patch as an RSS/JSON item."""

    id: str
    title: str
    link: str
    description: str
    created: datetime

    @classmethod
    def from_record(cls, record: PatchRecord, link_base: str) -> "FeedItem":
        return cls(
            id=record.name,
            title=record.name,
            link=f"{link_base}{record.name}",
            description=record.title,
            created=record.created_at,
        )

    def as_json(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "created": self.created.isoformat(),
        }


class QueryFacade:
    """List recent patches under the same exclusive section as scraping."""

    def __init__(self, store: PatchStore, section: ExclusiveSection, link_base: str) -> None:
        self.store = store
        self.section = section
        self.link_base = link_base

    def recent(self, count: Any = None) -> list[FeedItem]:
        limit = coerce_limit(count, self.store.default_limit)
        with self.section.hold("query"):
            records = self.store.list_recent(limit)
        return [FeedItem.from_record(record, self.link_base) for record in records]


__all__ = ["FeedItem", "QueryFacade"]
