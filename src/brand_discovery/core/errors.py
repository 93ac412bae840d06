"""Exceptions raised by the discovery pipeline."""

from typing import Optional


class DiscoveryError(Exception):
    """Base class for all discovery pipeline errors."""


class ConfigurationError(DiscoveryError):
    """Session cannot start: brand profile missing or unusable."""


class SessionStateError(DiscoveryError):
    """Control operation not allowed in the current session state."""


class ProviderError(DiscoveryError):
    """A single search provider call failed."""
    
    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within the configured timeout."""


class ProviderQuotaError(ProviderError):
    """Provider quota or local rate limit exhausted."""


class ProviderResponseError(ProviderError):
    """Provider answered with an error status or an unreadable body."""
    
    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(provider, message)
        self.status_code = status_code


class ProviderNotConfiguredError(ProviderError):
    """Provider credentials are missing."""


class UnsupportedProviderError(ProviderError):
    """No backend is registered under the given provider name."""
    
    def __init__(self, provider: str) -> None:
        super().__init__(provider, "unsupported provider")


class AllProvidersFailedError(DiscoveryError):
    """Every provider failed for one query."""
    
    def __init__(self, query: str, errors: list[ProviderError]) -> None:
        details = "; ".join(str(e) for e in errors) or "no providers available"
        super().__init__(f'All providers failed for "{query}": {details}')
        self.query = query
        self.errors = errors


class KnownSiteConflictError(DiscoveryError):
    """A known site with the same base URL already exists."""
    
    def __init__(self, base_url: str) -> None:
        super().__init__(f"Known site already exists: {base_url}")
        self.base_url = base_url
