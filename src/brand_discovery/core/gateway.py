"""Search provider gateway: rotation, rate limiting and failure isolation."""

import logging
import time
from collections import Counter
from typing import Awaitable, Callable, Optional

from brand_discovery.core.entities import SearchOptions, SearchQuery, SearchResult
from brand_discovery.core.errors import AllProvidersFailedError, ProviderError
from brand_discovery.core.interfaces import ResultCache, SearchBackend
from brand_discovery.core.rate_limiter import ProviderRateLimiter

logger = logging.getLogger(__name__)

ProviderErrorCallback = Callable[[str, Exception], Awaitable[None]]


def build_query_string(query: SearchQuery) -> str:
    """Render a query as search-engine syntax: terms, ``-"exclusions"``, ``site:``."""
    parts = [" ".join(query.terms)]
    if query.exclude_terms:
        parts.append(" ".join(f'-"{term}"' for term in query.exclude_terms))
    if query.site_restriction:
        parts.append(f"site:{query.site_restriction}")
    return " ".join(parts)


class SearchGateway:
    """Run queries against several search providers.

    Providers are tried in an order that rotates every minute so load spreads
    across them. A failing provider is logged and skipped; only when every
    provider fails does the query itself fail.
    """

    def __init__(
        self,
        backend: SearchBackend,
        rate_limiter: ProviderRateLimiter,
        providers: Optional[list[str]] = None,
        cache: Optional[ResultCache] = None,
        exclude_sites: Optional[list[str]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.rate_limiter = rate_limiter
        self.providers = providers
        self.cache = cache
        self.exclude_sites = exclude_sites or []
        self._clock = clock
        self._successes: Counter[str] = Counter()
        self._failures: Counter[str] = Counter()

    def rotation_order(self) -> list[str]:
        """Configured providers that are available, rotated by minute bucket."""
        available = self.backend.available_providers()
        if self.providers is not None:
            available = [p for p in self.providers if p in available]
        if not available:
            return []

        rotation = int(self._clock() // 60) % len(available)
        return available[rotation:] + available[:rotation]

    async def search(self, provider: str, query: SearchQuery) -> list[SearchResult]:
        """Run one query on one provider.

        Raises:
            ProviderError: the provider or its rate limit failed.
        """
        query_string = build_query_string(query)
        cache_key = f"search:{provider}:{query.max_results}:{query_string}"

        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s on %s", query_string, provider)
                return list(cached)

        await self.rate_limiter.acquire(provider)
        options = SearchOptions(
            limit=query.max_results,
            site=query.site_restriction,
            exclude_sites=list(self.exclude_sites),
        )
        results = await self.backend.search(provider, query_string, options)

        if self.cache is not None:
            await self.cache.set(cache_key, list(results), tags=[provider])
        return results

    async def search_across_providers(
        self,
        query: SearchQuery,
        on_provider_error: Optional[ProviderErrorCallback] = None,
    ) -> list[SearchResult]:
        """Collect results across providers until `max_results` is reached.

        Raises:
            AllProvidersFailedError: no provider answered.
        """
        results: list[SearchResult] = []
        seen: set[str] = set()
        errors: list[ProviderError] = []
        answered = False

        for provider in self.rotation_order():
            try:
                provider_results = await self.search(provider, query)
            except Exception as e:
                error = e if isinstance(e, ProviderError) else ProviderError(provider, str(e))
                errors.append(error)
                self._failures[provider] += 1
                logger.warning("Provider %s failed for %r: %s", provider, query.text, e)
                if on_provider_error is not None:
                    await on_provider_error(provider, error)
                continue

            answered = True
            self._successes[provider] += 1
            for result in provider_results:
                key = result.url.lower()
                if key and key not in seen:
                    seen.add(key)
                    results.append(result)

            if len(results) >= query.max_results:
                break

        if not answered:
            raise AllProvidersFailedError(query.text, errors)

        return results[: query.max_results]

    def get_provider_stats(self) -> dict[str, dict[str, float]]:
        """Successes, failures and rate-limit usage per provider."""
        usage = self.rate_limiter.usage()
        providers = set(self._successes) | set(self._failures) | set(usage)
        return {
            provider: {
                "successes": self._successes[provider],
                "failures": self._failures[provider],
                **usage.get(provider, {}),
            }
            for provider in sorted(providers)
        }
