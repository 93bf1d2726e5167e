"""Chat webhook payloads and bot command handling."""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, Field

from .logging_conf import get_logger
from .query import QueryFacade

DEFAULT_REPLY_LIMIT = 1000


class LingrMessage(BaseModel):
    id: str = ""
    room: str = ""
    public_session_id: str = ""
    icon_url: str = ""
    type: str = ""
    speaker_id: str = ""
    nickname: str = ""
    text: str = ""


class LingrEvent(BaseModel):
    event_id: int = 0
    message: LingrMessage | None = None


class LingrStatus(BaseModel):
    """Body POSTed by the chat service to the webhook."""

    events: list[LingrEvent] = Field(default_factory=list)


def format_reply(results: str, limit: int = DEFAULT_REPLY_LIMIT) -> str:
    """Trim trailing newlines and cap the reply so it never exceeds ``limit`` characters."""

    if not results:
        return ""
    results = results.rstrip("\n")
    # the trailing newline counts towards the limit
    if len(results) >= limit:
        results = results[: limit - 1]
    return results + "\n"


class CommandBot:
    """Dispatch ``!command`` messages to handlers and collect their replies."""

    def __init__(
        self,
        facade: QueryFacade,
        refresh: Callable[[], Any],
        reply_limit: int = DEFAULT_REPLY_LIMIT,
    ) -> None:
        self.facade = facade
        self.refresh = refresh
        self.reply_limit = reply_limit
        self.logger = get_logger("bot")
        self.commands: dict[str, Callable[[str], str]] = {
            "!patches": self._recent_patches,
            "!pull": self._pull,
        }

    def handle_events(self, events: list[LingrEvent]) -> str:
        results = ""
        for event in events:
            if event.message is None:
                continue
            tokens = event.message.text.split(" ", 1)
            handler = self.commands.get(tokens[0])
            if handler is None:
                continue
            self.logger.info("bot_command", command=tokens[0], room=event.message.room)
            results += handler(tokens[1] if len(tokens) > 1 else "")
        return results

    def respond(self, status: LingrStatus) -> str:
        return format_reply(self.handle_events(status.events), self.reply_limit)

    def _recent_patches(self, argument: str) -> str:
        items = self.facade.recent(argument.strip() or None)
        return "".join(f"{item.id} {item.description}\n" for item in items)

    def _pull(self, _argument: str) -> str:
        self.refresh()
        return "OK\n"


__all__ = [
    "CommandBot",
    "DEFAULT_REPLY_LIMIT",
    "LingrEvent",
    "LingrMessage",
    "LingrStatus",
    "format_reply",
]
