"""Shared plumbing for HTTP search backends."""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from brand_discovery.core import (
    ProviderError,
    ProviderQuotaError,
    ProviderResponseError,
    ProviderTimeoutError,
    SearchOptions,
    SearchResult,
)


def clean_text(text: Optional[str]) -> str:
    """Strip HTML markup and entities that providers leave in titles and snippets."""
    if not text:
        return ""
    if "<" not in text and "&" not in text:
        return " ".join(text.split())
    return BeautifulSoup(text, "html.parser").get_text(" ", strip=True)


class HttpSearchBackend(ABC):
    """One external search API reached over HTTP."""

    name = ""

    def __init__(
        self,
        timeout: float = 10.0,
        country: str = "br",
        language: str = "pt",
        safe_search: bool = True,
    ) -> None:
        self.timeout = timeout
        self.country = country
        self.language = language
        self.safe_search = safe_search

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present."""
        pass

    @abstractmethod
    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]:
        pass

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict:
        """Send one request and decode the JSON body.

        Raises:
            ProviderTimeoutError, ProviderQuotaError, ProviderResponseError,
            ProviderError: depending on how the call failed.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.name, f"timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise ProviderError(self.name, f"network error: {e}") from e

        if response.status_code == 429:
            raise ProviderQuotaError(self.name, "quota exceeded (HTTP 429)")
        if response.status_code != 200:
            raise ProviderResponseError(
                self.name, f"API error: {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError(self.name, "malformed JSON response") from e
        if not isinstance(data, dict):
            raise ProviderResponseError(self.name, "unexpected response shape")
        return data

    def _result(self, title: Any, url: Any, snippet: Any, rank: int) -> Optional[SearchResult]:
        if not url:
            return None
        return SearchResult(
            title=clean_text(title),
            url=str(url),
            snippet=clean_text(snippet),
            source_provider=self.name,
            rank=rank,
        )
