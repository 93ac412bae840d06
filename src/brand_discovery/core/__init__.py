"""Core domain layer."""

from brand_discovery.core.duplicate_filter import DuplicateFilter, Verdict
from brand_discovery.core.entities import (
    BrandProfile,
    ClassificationResult,
    DiscoveryResult,
    DiscoverySession,
    EventType,
    KnownEntry,
    KnownSite,
    Platform,
    PlatformDetails,
    QueryPriority,
    SearchOptions,
    SearchQuery,
    SearchResult,
    SessionStatus,
    SiteCategory,
    SuspicionReport,
    UrlAnalysis,
    ViolationPattern,
)
from brand_discovery.core.errors import (
    AllProvidersFailedError,
    ConfigurationError,
    DiscoveryError,
    KnownSiteConflictError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderQuotaError,
    ProviderResponseError,
    ProviderTimeoutError,
    SessionStateError,
    UnsupportedProviderError,
)
from brand_discovery.core.gateway import SearchGateway, build_query_string
from brand_discovery.core.historical_analyzer import HistoricalAnalyzer
from brand_discovery.core.interfaces import (
    EventSink,
    KnownSiteStore,
    ResultCache,
    SearchBackend,
    SessionStore,
)
from brand_discovery.core.known_corpus import KnownCorpusIndex
from brand_discovery.core.query_planner import QueryPlanner
from brand_discovery.core.rate_limiter import ProviderRateLimiter
from brand_discovery.core.risk_scorer import RiskScorer
from brand_discovery.core.url_normalizer import extract_domain, extract_path, normalize_url

__all__ = [
    "BrandProfile",
    "ClassificationResult",
    "DiscoveryResult",
    "DiscoverySession",
    "EventType",
    "KnownEntry",
    "KnownSite",
    "Platform",
    "PlatformDetails",
    "QueryPriority",
    "SearchOptions",
    "SearchQuery",
    "SearchResult",
    "SessionStatus",
    "SiteCategory",
    "SuspicionReport",
    "UrlAnalysis",
    "ViolationPattern",
    "AllProvidersFailedError",
    "ConfigurationError",
    "DiscoveryError",
    "KnownSiteConflictError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderQuotaError",
    "ProviderResponseError",
    "ProviderTimeoutError",
    "SessionStateError",
    "UnsupportedProviderError",
    "EventSink",
    "KnownSiteStore",
    "ResultCache",
    "SearchBackend",
    "SessionStore",
    "DuplicateFilter",
    "Verdict",
    "HistoricalAnalyzer",
    "KnownCorpusIndex",
    "QueryPlanner",
    "ProviderRateLimiter",
    "RiskScorer",
    "SearchGateway",
    "build_query_string",
    "normalize_url",
    "extract_domain",
    "extract_path",
]
