"""Search backend dispatching to the configured HTTP providers."""

import logging
from typing import Optional

from brand_discovery.adapters.search.base import HttpSearchBackend
from brand_discovery.adapters.search.bing_backend import BingBackend
from brand_discovery.adapters.search.google_backend import GoogleBackend
from brand_discovery.adapters.search.serper_backend import SerperBackend
from brand_discovery.config import Settings
from brand_discovery.core import (
    ProviderNotConfiguredError,
    SearchBackend,
    SearchOptions,
    SearchResult,
    UnsupportedProviderError,
    extract_domain,
)

logger = logging.getLogger(__name__)


class SearchClient(SearchBackend):
    """Route searches to Serper, Google Custom Search or Bing by name."""

    def __init__(self, backends: list[HttpSearchBackend]) -> None:
        self.backends = {backend.name: backend for backend in backends}

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchClient":
        providers = settings.providers
        common = {
            "timeout": providers.timeout,
            "country": providers.country,
            "language": providers.language,
            "safe_search": providers.safe_search,
        }
        return cls([
            SerperBackend(settings.serper_api_key, **common),
            GoogleBackend(settings.google_api_key, settings.google_engine_id, **common),
            BingBackend(settings.bing_api_key, **common),
        ])

    def available_providers(self) -> list[str]:
        return [name for name, backend in self.backends.items() if backend.is_configured]

    async def search(
        self, provider: str, query: str, options: SearchOptions
    ) -> list[SearchResult]:
        backend = self._backend(provider)
        results = await backend.search(query, options)

        if options.exclude_sites:
            results = [r for r in results if not _is_excluded(r.url, options.exclude_sites)]

        logger.debug("%s returned %d results for %r", provider, len(results), query)
        return results[: options.limit]

    def _backend(self, provider: str) -> HttpSearchBackend:
        backend: Optional[HttpSearchBackend] = self.backends.get(provider)
        if backend is None:
            raise UnsupportedProviderError(provider)
        if not backend.is_configured:
            raise ProviderNotConfiguredError(provider, "credentials missing")
        return backend


def _is_excluded(url: str, exclude_sites: list[str]) -> bool:
    domain = extract_domain(url)
    for site in exclude_sites:
        site = site.lower().strip()
        if site.startswith("www."):
            site = site[4:]
        if site and (domain == site or domain.endswith("." + site)):
            return True
    return False
