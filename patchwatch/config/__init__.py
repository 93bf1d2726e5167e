"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    DEFAULT_RECENT_LIMIT,
    AppConfig,
    NotifierConfig,
    ScheduleConfig,
    ServerConfig,
    SourceConfig,
    SourceMode,
    StoreConfig,
)

__all__ = [
    "AppConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_RECENT_LIMIT",
    "NotifierConfig",
    "ScheduleConfig",
    "ServerConfig",
    "SourceConfig",
    "SourceMode",
    "StoreConfig",
]
