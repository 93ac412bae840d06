"""Search provider adapters."""

from brand_discovery.adapters.search.base import HttpSearchBackend, clean_text
from brand_discovery.adapters.search.bing_backend import BingBackend
from brand_discovery.adapters.search.google_backend import GoogleBackend
from brand_discovery.adapters.search.search_client import SearchClient
from brand_discovery.adapters.search.serper_backend import SerperBackend

__all__ = [
    "BingBackend",
    "GoogleBackend",
    "HttpSearchBackend",
    "SearchClient",
    "SerperBackend",
    "clean_text",
]
