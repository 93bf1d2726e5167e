"""Shared fixtures for the patchwatch test-suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import httpx
import pytest

from patchwatch.config import AppConfig, ConfigLocator, ConfigRepository, SourceConfig, StoreConfig
from patchwatch.engine import Fetcher, NotificationSink, PatchStore
from patchwatch.infra import ExclusiveSection, SQLiteManager

SOURCE_URL = "http://patches.example.org/vim/7.4/"

TABLE_PAGE = """<html><head><title>Index of /vim/patches/7.4</title></head><body>
<pre>
Patches for Vim - Vi IMproved 7.4

The files in this directory contain source code changes to fix problems
in a released version of Vim.

  SIZE  NAME     FIXES
  1639  7.4.001  'ic' doesn't work for patterns such as [a-z]
  1800  7.4.002  pattern with two alternative look-behind matches does not match
  2043  7.4.003  memory access error in Ruby syntax highlighting

Individual patches for Vim 7.4:
</pre>
</body></html>
"""


class RecordingNotifier(NotificationSink):
    """Collect notification texts instead of sending them."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, text: str) -> None:
        self.messages.append(text)


@pytest.fixture
def table_page() -> str:
    return TABLE_PAGE


@pytest.fixture
def source_url() -> str:
    return SOURCE_URL


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        source=SourceConfig(url=SOURCE_URL),
        store=StoreConfig(path=tmp_path / "patches.db"),
    )


@pytest.fixture
def sqlite_manager() -> Iterable[SQLiteManager]:
    manager = SQLiteManager()
    yield manager
    manager.close_all()


@pytest.fixture
def store(tmp_path: Path, sqlite_manager: SQLiteManager) -> PatchStore:
    return PatchStore(sqlite_manager, tmp_path / "patches.db")


@pytest.fixture
def section() -> ExclusiveSection:
    return ExclusiveSection()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_fetcher() -> Callable[..., Fetcher]:
    """Build a Fetcher whose HTTP client answers with a canned body or status."""

    def _builder(body: str = TABLE_PAGE, status: int = 200, url: str = SOURCE_URL) -> Fetcher:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, text=body, request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return Fetcher(SourceConfig(url=url), client=client)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("PATCHWATCH_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator, environ={})
    yield repository
