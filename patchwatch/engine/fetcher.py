"""HTTP fetching of the remote changelog source."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from ..config import SourceConfig
from ..errors import FetchError
from ..logging_conf import get_logger


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str


class Fetcher:
    """Issue GET requests with a shared client and uniform failure reporting."""

    def __init__(
        self,
        source: SourceConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.source = source
        self.logger = logger or get_logger("fetcher")
        headers = {"User-Agent": source.user_agent} if source.user_agent else None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=source.timeout,
            headers=headers,
        )

    def close(self) -> None:
        self._client.close()

    def fetch_source(self) -> FetchResponse:
        return self.fetch(self.source.url)

    def fetch(self, url: str) -> FetchResponse:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            self.logger.warning("fetch_error", url=url, error=str(exc))
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        if self._is_failure(response):
            self.logger.warning("fetch_bad_status", url=url, status=response.status_code)
            raise FetchError(url, f"Unexpected status {response.status_code}")
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
        )

    @staticmethod
    def _is_failure(response: httpx.Response) -> bool:
        return response.status_code >= 400


__all__ = ["FetchResponse", "Fetcher"]
