"""Notification sink interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class NotificationSink(ABC):
    """One-way, best-effort message delivery to a chat room."""

    @abstractmethod
    def notify(self, text: str) -> None:
        """Send ``text``; implementations log failures instead of raising."""

    def close(self) -> None:
        """Release underlying resources."""


class NullNotifier(NotificationSink):
    """Discard every message; used when notifications are disabled."""

    def notify(self, text: str) -> None:
        return None


__all__ = ["NotificationSink", "NullNotifier"]
