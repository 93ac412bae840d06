"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from brand_discovery.core.entities import (
    DiscoveryResult,
    EventType,
    KnownSite,
    SearchOptions,
    SearchResult,
)


class KnownSiteStore(ABC):
    """Interface for the known-site and violation-history store."""

    @abstractmethod
    async def list_known_sites(self) -> list[KnownSite]:
        """Return every stored known site."""
        pass

    @abstractmethod
    async def list_historical_urls(self, limit: int) -> list[str]:
        """Return up to `limit` historical violation URLs."""
        pass

    @abstractmethod
    async def create_known_site(self, result: DiscoveryResult, user_id: Optional[str] = None) -> None:
        """Store a discovered site.

        Raises:
            KnownSiteConflictError: a site with the same base URL exists.
        """
        pass


class SearchBackend(ABC):
    """Interface for external search backends."""

    @abstractmethod
    async def search(
        self, provider: str, query: str, options: SearchOptions
    ) -> list[SearchResult]:
        """Run `query` on `provider`.

        Raises:
            ProviderError: the provider failed; subclasses tell why.
        """
        pass

    @abstractmethod
    def available_providers(self) -> list[str]:
        """Providers that are configured and can be called."""
        pass


class SessionStore(ABC):
    """Interface for discovery session persistence."""

    @abstractmethod
    async def create_session(self, user_id: Optional[str], brand_profile_id: str) -> str:
        """Create a session record and return its id."""
        pass

    @abstractmethod
    async def update_session(self, session_id: str, updates: dict[str, Any]) -> None:
        """Apply progress fields (processed, total, found, current_query, eta, status)."""
        pass


class EventSink(ABC):
    """Interface for session lifecycle events."""

    @abstractmethod
    async def emit(self, session_id: str, event_type: EventType, payload: dict[str, Any]) -> None:
        """Deliver one event."""
        pass


class ResultCache(ABC):
    """Interface for an external cache shared by pipeline stages."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, tags: Optional[list[str]] = None) -> None:
        pass

    @abstractmethod
    async def invalidate_by_tag(self, tag: str) -> int:
        """Drop every entry carrying `tag`; return how many were removed."""
        pass
