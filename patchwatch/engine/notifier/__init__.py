"""Notification sinks."""

from ...config import NotifierConfig
from .base import NotificationSink, NullNotifier
from .lingr import LingrNotifier, bot_verifier


def build_notifier(config: NotifierConfig) -> NotificationSink:
    if not config.enabled:
        return NullNotifier()
    return LingrNotifier(config)


__all__ = ["LingrNotifier", "NotificationSink", "NullNotifier", "bot_verifier", "build_notifier"]
