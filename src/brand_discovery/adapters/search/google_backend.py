"""Google Custom Search backend."""

from brand_discovery.adapters.search.base import HttpSearchBackend
from brand_discovery.core import ProviderNotConfiguredError, SearchOptions, SearchResult

# Custom Search returns at most 10 results per request
MAX_PAGE_SIZE = 10


class GoogleBackend(HttpSearchBackend):
    """Google Custom Search JSON API."""

    name = "google"
    endpoint = "https://www.googleapis.com/customsearch/v1"

    def __init__(self, api_key: str, engine_id: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key
        self.engine_id = engine_id

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.engine_id)

    async def search(self, query: str, options: SearchOptions) -> list[SearchResult]:
        if not self.is_configured:
            raise ProviderNotConfiguredError(self.name, "Google Search API not configured")

        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": min(options.limit, MAX_PAGE_SIZE),
            "gl": self.country,
            "hl": self.language,
            "safe": "active" if self.safe_search else "off",
        }
        if options.site:
            params["siteSearch"] = options.site

        data = await self._request("GET", self.endpoint, params=params)

        results = []
        for rank, item in enumerate(data.get("items") or [], 1):
            snippet = item.get("htmlSnippet") or item.get("snippet")
            result = self._result(item.get("title"), item.get("link"), snippet, rank)
            if result:
                results.append(result)
        return results
