"""Bing Web Search v7 backend."""

from brand_discovery.adapters.search.base import HttpSearchBackend
from brand_discovery.core import ProviderNotConfiguredError, SearchOptions, SearchResult


class BingBackend(HttpSearchBackend):
    """Bing Web Search API."""

    name = "bing"
    endpoint = "https://api.bing.microsoft.com/v7.0/search"

    def __init__(self, api_key: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]:
        if not self.is_configured:
            raise ProviderNotConfiguredError(self.name, "BING_SEARCH_API_KEY not set")

        data = await self._request(
            "GET",
            self.endpoint,
            headers={"Ocp-Apim-Subscription-Key": self.api_key},
            params={
                "q": query,
                "count": options.limit,
                "mkt": f"{self.language}-{self.country.upper()}",
                "safeSearch": "Moderate" if self.safe_search else "Off",
            },
        )

        results = []
        pages = (data.get("webPages") or {}).get("value") or []
        for rank, item in enumerate(pages, 1):
            result = self._result(item.get("name"), item.get("url"), item.get("snippet"), rank)
            if result:
                results.append(result)
        return results
