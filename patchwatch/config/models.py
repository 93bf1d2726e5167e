"""Pydantic models used across patchwatch configuration flow."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_SOURCE_URL = "http://ftp.vim.org/vim/patches/7.4/"
DEFAULT_RECENT_LIMIT = 10


class SourceMode(str, Enum):
    """Layouts the record extractor understands."""

    TABULAR = "tabular"
    FEED = "feed"


class SourceConfig(BaseModel):
    """Remote changelog source and how to read it."""

    url: str = DEFAULT_SOURCE_URL
    mode: SourceMode = SourceMode.TABULAR
    link_base: str | None = Field(
        default=None,
        description="Prefix joined with a patch name to build item links; defaults to url.",
    )
    timeout: float = 15.0
    user_agent: str | None = None

    @field_validator("url")
    @classmethod
    def _require_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("Source url must be an http(s) URL")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value

    def resolved_link_base(self) -> str:
        return self.link_base if self.link_base is not None else self.url


class StoreConfig(BaseModel):
    """SQLite location and listing defaults."""

    path: Path = Field(default=Path("data/patches.db"))
    default_limit: int = DEFAULT_RECENT_LIMIT

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("default_limit")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("default_limit must be >= 1")
        return value

    def resolved_path(self, base_dir: Path) -> Path:
        """Return database path relative to the project root."""

        if not self.path.is_absolute():
            return (base_dir / self.path).resolve()
        return self.path


class NotifierConfig(BaseModel):
    """Chat room notification settings."""

    enabled: bool = False
    endpoint: str = "http://lingr.com/api/room/say"
    room: str = "vim"
    bot: str = "vim_jp"
    secret: str = ""
    timeout: float = 10.0

    @model_validator(mode="after")
    def _require_secret(self) -> "NotifierConfig":
        if self.enabled and not self.secret:
            raise ValueError("notifier.secret is required when notifications are enabled")
        return self


class ScheduleConfig(BaseModel):
    """Fixed-interval polling of the source."""

    interval_seconds: float = 600.0
    run_on_start: bool = False

    @field_validator("interval_seconds")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("interval_seconds must be > 0")
        return value


class ServerConfig(BaseModel):
    """HTTP listener and auxiliary endpoints."""

    host: str = "0.0.0.0"
    port: int = 8080
    feed_title: str = "Vim patches"
    public_dir: Path | None = None
    vimmers_url: str | None = (
        "https://raw.github.com/vim-jp/vim-jp.github.com/master/vimmers/vimmers.json"
    )
    reply_limit: int = 1000

    @field_validator("public_dir", mode="before")
    @classmethod
    def _coerce_public_dir(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @field_validator("port")
    @classmethod
    def _valid_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("port must be between 1 and 65535")
        return value


class AppConfig(BaseModel):
    """Top-level configuration document."""

    source: SourceConfig = Field(default_factory=SourceConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


__all__ = [
    "AppConfig",
    "DEFAULT_RECENT_LIMIT",
    "DEFAULT_SOURCE_URL",
    "NotifierConfig",
    "ScheduleConfig",
    "ServerConfig",
    "SourceConfig",
    "SourceMode",
    "StoreConfig",
]
