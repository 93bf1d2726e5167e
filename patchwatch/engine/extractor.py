"""Record extraction strategies for the supported changelog layouts."""

from __future__ import annotations

import io
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from html import unescape
from typing import Any, Iterator

import feedparser
from selectolax.parser import HTMLParser

from ..config import SourceMode
from ..logging_conf import get_logger

HEADER_PATTERN = re.compile(r"^\s+SIZE\s+NAME\s+FIXES$")
ROW_PATTERN = re.compile(r"^\s+\d")
ROW_FIELDS_PATTERN = re.compile(r"^\s*\d+\s+(\S+)\s+(.*)$")

TAG_PATTERN = re.compile(r"<[^>]+>")
VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)+$")
BANNER_PATTERN = re.compile(r"^\s*patch\s+\S+[^\n]*", re.IGNORECASE)
KEY_PUNCTUATION = ":;,.()[]\"'"


@dataclass(slots=True, frozen=True)
class CandidateRecord:
    """An extracted, not yet persisted patch."""

    name: str
    title: str
    description: str = ""

    @property
    def notification_text(self) -> str:
        return f"{self.name}\n{self.title}"


class RecordExtractor(ABC):
    """Turn scraped text into candidate records; never fails the whole pass."""

    def __init__(self) -> None:
        self.logger = get_logger("extractor")

    @abstractmethod
    def extract(self, raw_text: str) -> Iterator[CandidateRecord]:
        """Yield candidate records in source order."""


class TabularExtractor(RecordExtractor):
    """Read the fixed-column patch table of an index page's ``<pre>`` block."""

    def extract(self, raw_text: str) -> Iterator[CandidateRecord]:
        lines = [line.rstrip("\r") for line in self._table_text(raw_text).split("\n")]
        start = end = None
        for index, line in enumerate(lines):
            if start is None:
                if HEADER_PATTERN.match(line):
                    start = index
            elif not ROW_PATTERN.match(line):
                end = index
                break
        if start is None:
            self.logger.info("table_header_missing")
            return
        if end is None:
            # A truncated page gives no safe cut-off point
            self.logger.warning("table_end_missing", header_line=start)
            return
        for line in lines[start + 1 : end]:
            match = ROW_FIELDS_PATTERN.match(line)
            if match is None:
                self.logger.debug("table_row_skipped", line=line)
                continue
            yield CandidateRecord(name=match.group(1), title=match.group(2).strip())

    @staticmethod
    def _table_text(raw_text: str) -> str:
        if "<" not in raw_text:
            return raw_text
        blocks = HTMLParser(raw_text).css("pre")
        if not blocks:
            return raw_text
        return "\n".join(node.text(deep=True) for node in blocks)


class FeedExtractor(RecordExtractor):
    """Read patch entries from an Atom/RSS document."""

    def extract(self, raw_text: str) -> Iterator[CandidateRecord]:
        # A stream keeps feedparser from treating short bodies as URLs or paths
        feed = feedparser.parse(io.BytesIO(raw_text.encode("utf-8")))
        if feed.get("bozo") and not feed.entries:
            self.logger.warning("feed_unparsable", error=str(feed.get("bozo_exception", "")))
            return
        for entry in feed.entries:
            candidate = self.parse_entry(entry)
            if candidate is None:
                self.logger.debug("feed_entry_skipped", entry_id=entry.get("id"))
                continue
            yield candidate

    def parse_entry(self, entry: Any) -> CandidateRecord | None:
        body = self._entry_body(entry)
        text = unescape(TAG_PATTERN.sub("", body))
        first_line = next((line.strip() for line in text.splitlines() if line.strip()), None)
        if first_line is None:
            return None
        tokens = first_line.split()
        if len(tokens) < 2:
            return None
        name = tokens[1].strip(KEY_PUNCTUATION)
        if not VERSION_PATTERN.match(name):
            return None
        description = BANNER_PATTERN.sub("", text.strip(), count=1).strip()
        return CandidateRecord(name=name, title=first_line, description=description)

    @staticmethod
    def _entry_body(entry: Any) -> str:
        content = entry.get("content") or []
        if content:
            return content[0].get("value", "") or ""
        return entry.get("summary", "") or ""


def build_extractor(mode: SourceMode) -> RecordExtractor:
    if mode is SourceMode.TABULAR:
        return TabularExtractor()
    if mode is SourceMode.FEED:
        return FeedExtractor()
    raise ValueError(f"Unknown source mode: {mode}")


__all__ = [
    "CandidateRecord",
    "FeedExtractor",
    "RecordExtractor",
    "TabularExtractor",
    "build_extractor",
]
