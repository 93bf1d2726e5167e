"""Engine components wiring fetch → extract → store → notify."""

from .extractor import CandidateRecord, FeedExtractor, RecordExtractor, TabularExtractor, build_extractor
from .fetcher import FetchResponse, Fetcher
from .notifier import LingrNotifier, NotificationSink, NullNotifier, build_notifier
from .store import InsertResult, InsertStatus, PatchRecord, PatchStore, coerce_limit

__all__ = [
    "CandidateRecord",
    "FeedExtractor",
    "FetchResponse",
    "Fetcher",
    "InsertResult",
    "InsertStatus",
    "LingrNotifier",
    "NotificationSink",
    "NullNotifier",
    "PatchRecord",
    "PatchStore",
    "RecordExtractor",
    "TabularExtractor",
    "build_extractor",
    "build_notifier",
    "coerce_limit",
]
