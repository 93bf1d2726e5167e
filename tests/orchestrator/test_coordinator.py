from __future__ import annotations

from patchwatch.engine import (
    CandidateRecord,
    FeedExtractor,
    InsertResult,
    InsertStatus,
    NotificationSink,
    PatchStore,
    TabularExtractor,
)
from patchwatch.orchestrator import ScrapeCoordinator

FEED_WITH_ONE_PATCH = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <id>urn:vim:tags</id>
  <title>Tags</title>
  <updated>2024-01-01T00:00:00Z</updated>
  <entry>
    <id>urn:vim:tags:v9.0.1234</id>
    <updated>2024-01-01T00:00:00Z</updated>
    <title>v9.0.1234</title>
    <content type="html">&lt;p&gt;patch 9.0.1234: fix foo&lt;/p&gt;
Details here</content>
  </entry>
</feed>
"""


def _coordinator(fetcher, store, notifier, section, extractor=None) -> ScrapeCoordinator:
    return ScrapeCoordinator(
        fetcher=fetcher,
        extractor=extractor or TabularExtractor(),
        store=store,
        notifier=notifier,
        section=section,
    )


def test_cycle_inserts_and_notifies_each_new_patch(make_fetcher, store, notifier, section) -> None:
    summary = _coordinator(make_fetcher(), store, notifier, section).run_cycle()
    assert summary.fetched
    assert (summary.candidates, summary.inserted, summary.duplicates, summary.failed) == (3, 3, 0, 0)
    assert summary.notified == 3
    assert notifier.messages[0] == "7.4.001\n'ic' doesn't work for patterns such as [a-z]"
    assert [message.split("\n")[0] for message in notifier.messages] == ["7.4.001", "7.4.002", "7.4.003"]
    assert store.count() == 3
    assert not section.locked()


def test_rerun_against_unchanged_source_is_idempotent(make_fetcher, store, notifier, section) -> None:
    coordinator = _coordinator(make_fetcher(), store, notifier, section)
    coordinator.run_cycle()
    before = [(record.name, record.created_at) for record in store.list_recent(50)]

    second = coordinator.run_cycle()
    after = [(record.name, record.created_at) for record in store.list_recent(50)]

    assert second.inserted == 0
    assert second.duplicates == 3
    assert second.notified == 0
    assert len(notifier.messages) == 3
    assert before == after


def test_repeated_key_within_one_pass_is_stored_once(make_fetcher, store, notifier, section) -> None:
    page = "\n".join(
        [
            "  SIZE  NAME     FIXES",
            "  1639  7.4.001  first",
            "  1639  7.4.001  first, listed twice",
            "  1800  7.4.002  second",
            "",
        ]
    )
    summary = _coordinator(make_fetcher(page), store, notifier, section).run_cycle()
    assert summary.inserted == 2
    assert summary.duplicates == 1
    assert notifier.messages == ["7.4.001\nfirst", "7.4.002\nsecond"]
    assert store.count() == 2


def test_fetch_failure_aborts_cycle_without_writes(make_fetcher, store, notifier, section) -> None:
    summary = _coordinator(make_fetcher(status=500), store, notifier, section).run_cycle()
    assert not summary.fetched
    assert summary.candidates == 0
    assert store.count() == 0
    assert notifier.messages == []
    assert not section.locked()


def test_persistence_failure_does_not_abort_remaining_candidates(
    make_fetcher, sqlite_manager, tmp_path, notifier, section
) -> None:
    class FlakyStore(PatchStore):
        def insert_if_absent(self, candidate: CandidateRecord) -> InsertResult:
            if candidate.name == "7.4.002":
                return InsertResult(InsertStatus.FAILED, RuntimeError("disk I/O error"))
            return super().insert_if_absent(candidate)

    store = FlakyStore(sqlite_manager, tmp_path / "flaky.db")
    summary = _coordinator(make_fetcher(), store, notifier, section).run_cycle()
    assert summary.inserted == 2
    assert summary.failed == 1
    assert [record.name for record in store.list_recent()] == ["7.4.003", "7.4.001"]
    assert [message.split("\n")[0] for message in notifier.messages] == ["7.4.001", "7.4.003"]


def test_notification_happens_after_commit(make_fetcher, store, section) -> None:
    committed_at_notify: list[int] = []

    class CheckingNotifier(NotificationSink):
        def notify(self, text: str) -> None:
            committed_at_notify.append(store.count())

    _coordinator(make_fetcher(), store, CheckingNotifier(), section).run_cycle()
    assert committed_at_notify == [1, 2, 3]


def test_raising_notifier_does_not_affect_persistence(make_fetcher, store, section) -> None:
    class ExplodingNotifier(NotificationSink):
        def notify(self, text: str) -> None:
            raise RuntimeError("chat down")

    summary = _coordinator(make_fetcher(), store, ExplodingNotifier(), section).run_cycle()
    assert summary.inserted == 3
    assert summary.notified == 0
    assert store.count() == 3


def test_feed_patch_inserted_twice_yields_one_record_and_one_notification(
    make_fetcher, store, notifier, section
) -> None:
    coordinator = _coordinator(
        make_fetcher(FEED_WITH_ONE_PATCH), store, notifier, section, extractor=FeedExtractor()
    )
    coordinator.run_cycle()
    coordinator.run_cycle()
    [record] = store.list_recent()
    assert record.name == "9.0.1234"
    assert record.description == "Details here"
    assert notifier.messages == ["9.0.1234\npatch 9.0.1234: fix foo"]
