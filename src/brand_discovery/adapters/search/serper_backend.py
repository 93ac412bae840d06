"""Serper (google.serper.dev) search backend."""

from brand_discovery.adapters.search.base import HttpSearchBackend
from brand_discovery.core import ProviderNotConfiguredError, SearchOptions, SearchResult


class SerperBackend(HttpSearchBackend):
    """Google results through the Serper API."""

    name = "serper"
    endpoint = "https://google.serper.dev/search"

    def __init__(self, api_key: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]:
        if not self.is_configured:
            raise ProviderNotConfiguredError(self.name, "SERPER_API_KEY not set")

        data = await self._request(
            "POST",
            self.endpoint,
            headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
            json={
                "q": query,
                "num": options.limit,
                "gl": self.country,
                "hl": self.language,
                "safe": "active" if self.safe_search else "off",
            },
        )

        results = []
        for rank, item in enumerate(data.get("organic") or [], 1):
            result = self._result(item.get("title"), item.get("link"), item.get("snippet"), rank)
            if result:
                results.append(result)
        return results
