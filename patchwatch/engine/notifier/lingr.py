"""Post messages to a Lingr-style room "say" endpoint."""

from __future__ import annotations

import hashlib

import httpx
import structlog

from ...config import NotifierConfig
from ...logging_conf import get_logger
from .base import NotificationSink


def bot_verifier(bot: str, secret: str) -> str:
    """Return ``hex(sha1(bot + secret))`` as expected by the room API."""

    return hashlib.sha1((bot + secret).encode("utf-8")).hexdigest()


class LingrNotifier(NotificationSink):
    """Fire-and-forget GET to the room endpoint; the response body is discarded."""

    def __init__(
        self,
        config: NotifierConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger("notifier")
        self._client = client or httpx.Client(timeout=config.timeout)
        self._verifier = bot_verifier(config.bot, config.secret)

    def build_params(self, text: str) -> dict[str, str]:
        return {
            "room": self.config.room,
            "bot": self.config.bot,
            "text": text,
            "bot_verifier": self._verifier,
        }

    def notify(self, text: str) -> None:
        self.logger.info("posting_notification", room=self.config.room)
        try:
            response = self._client.get(self.config.endpoint, params=self.build_params(text))
        except httpx.HTTPError as exc:
            self.logger.warning("notify_failed", room=self.config.room, error=str(exc))
            return
        if response.status_code >= 400:
            self.logger.warning(
                "notify_rejected", room=self.config.room, status=response.status_code
            )

    def close(self) -> None:
        self._client.close()


__all__ = ["LingrNotifier", "bot_verifier"]
