"""Scrape cycle coordinator wiring fetching, extraction, storage and notification."""

from __future__ import annotations

from dataclasses import asdict, dataclass

import structlog

from .engine import Fetcher, InsertStatus, NotificationSink, PatchStore, RecordExtractor
from .errors import FetchError
from .infra import ExclusiveSection
from .logging_conf import get_logger


@dataclass(slots=True)
class CycleSummary:
    """Counters describing one scrape cycle."""

    fetched: bool = False
    candidates: int = 0
    inserted: int = 0
    duplicates: int = 0
    failed: int = 0
    notified: int = 0

    def as_dict(self) -> dict[str, int | bool]:
        return asdict(self)


class ScrapeCoordinator:
    """Run fetch → extract → insert → notify under the exclusive section.

    Every candidate is committed in its own transaction, so a failing record
    never rolls back earlier insertions of the same pass. Notification happens
    only after a successful commit; duplicates and failures are never announced.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: RecordExtractor,
        store: PatchStore,
        notifier: NotificationSink,
        section: ExclusiveSection,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.store = store
        self.notifier = notifier
        self.section = section
        self.logger = logger or get_logger("coordinator")

    def run_cycle(self) -> CycleSummary:
        summary = CycleSummary()
        with self.section.hold("scrape"):
            self.logger.info("updating_patches", url=self.fetcher.source.url)
            try:
                response = self.fetcher.fetch_source()
            except FetchError as exc:
                self.logger.error("fetch_failed", url=exc.url, error=exc.reason)
                return summary
            summary.fetched = True
            self.logger.info(
                "source_fetched", url=response.url, status=response.status_code, size=len(response.text)
            )

            for candidate in self.extractor.extract(response.text):
                summary.candidates += 1
                result = self.store.insert_if_absent(candidate)
                if result.status is InsertStatus.ALREADY_EXISTS:
                    summary.duplicates += 1
                    continue
                if result.status is InsertStatus.FAILED:
                    summary.failed += 1
                    self.logger.error(
                        "patch_persist_failed", name=candidate.name, error=str(result.error)
                    )
                    continue
                summary.inserted += 1
                self.logger.info("patch_inserted", name=candidate.name)
                if self._notify(candidate.notification_text, candidate.name):
                    summary.notified += 1

        self.logger.info("update_finished", **summary.as_dict())
        return summary

    def _notify(self, text: str, name: str) -> bool:
        try:
            self.notifier.notify(text)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("notify_error", name=name, error=str(exc))
            return False
        return True


__all__ = ["CycleSummary", "ScrapeCoordinator"]
