"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional, Union


class QueryPriority(str, Enum):
    """Priority of a planned search query."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Sort key: higher runs first."""
        return {"HIGH": 3, "MEDIUM": 2, "LOW": 1}[self.value]


class SessionStatus(str, Enum):
    """Lifecycle state of a discovery session."""

    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class EventType(str, Enum):
    """Lifecycle events emitted by a discovery session."""

    DISCOVERY_STARTED = "discovery_started"
    QUERY_PROCESSING = "query_processing"
    DISCOVERY_PROGRESS = "discovery_progress"
    PROVIDER_ERROR = "provider_error"
    DISCOVERY_COMPLETED = "discovery_completed"
    DISCOVERY_ERROR = "discovery_error"
    DISCOVERY_PAUSED = "discovery_paused"
    DISCOVERY_RESUMED = "discovery_resumed"


class Platform(str, Enum):
    """Platform hosting a discovered page."""

    TELEGRAM = "telegram"
    DISCORD = "discord"
    REDDIT = "reddit"
    TWITTER = "twitter"
    ONLYFANS = "onlyfans"
    FILE_SHARING = "file-sharing"
    FORUM = "forum"
    UNKNOWN = "unknown"


class SiteCategory(str, Enum):
    """Category of a discovered site."""

    FORUM = "FORUM"
    SOCIAL_MEDIA = "SOCIAL_MEDIA"
    FILE_SHARING = "FILE_SHARING"
    ADULT_CONTENT = "ADULT_CONTENT"
    MESSAGING = "MESSAGING"
    UNKNOWN = "UNKNOWN"


@dataclass
class BrandProfile:
    """Brand being protected. Read-only during a session."""

    id: str
    name: str
    variations: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SearchQuery:
    """Planned search query."""

    terms: tuple[str, ...]
    exclude_terms: tuple[str, ...] = ()
    site_restriction: Optional[str] = None
    max_results: int = 10
    priority: QueryPriority = QueryPriority.MEDIUM

    @property
    def text(self) -> str:
        """Human-readable form used for progress reporting."""
        return " ".join(self.terms)


@dataclass
class SearchOptions:
    """Options passed to a search backend."""

    limit: int = 10
    site: Optional[str] = None
    exclude_sites: list[str] = field(default_factory=list)


@dataclass
class SearchResult:
    """One raw hit returned by a search provider."""

    title: str
    url: str
    snippet: str = ""
    source_provider: str = ""
    rank: int = 0


@dataclass
class KnownSite:
    """Record of the known-site store."""

    base_url: str
    domain: str


@dataclass(frozen=True)
class KnownEntry:
    """Entry of the known corpus."""

    normalized_url: str
    domain: str


@dataclass
class ClassificationResult:
    """Outcome of classifying a batch of candidate URLs."""

    new: list[str] = field(default_factory=list)
    duplicate: list[str] = field(default_factory=list)
    variation: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.new) + len(self.duplicate) + len(self.variation)


@dataclass
class SuspicionReport:
    """Heuristic suspicion flags for a URL."""

    suspicious: bool
    reasons: list[str]


@dataclass
class UrlAnalysis:
    """Detailed comparison of a URL against the known corpus."""

    normalized: str
    domain: str
    path: str
    is_known: bool
    is_variation: bool
    confidence: float


@dataclass
class ViolationPattern:
    """Recurring structure among historical violation URLs."""

    url_pattern: str
    platform_type: Optional[str] = None
    common_keywords: list[str] = field(default_factory=list)
    path_structure: str = ""
    frequency: int = 0


# Platform-specific details, one variant per platform.

@dataclass(frozen=True)
class TelegramDetails:
    platform: ClassVar[Platform] = Platform.TELEGRAM
    channel: Optional[str] = None


@dataclass(frozen=True)
class DiscordDetails:
    platform: ClassVar[Platform] = Platform.DISCORD
    invite_code: Optional[str] = None


@dataclass(frozen=True)
class RedditDetails:
    platform: ClassVar[Platform] = Platform.REDDIT
    subreddit: Optional[str] = None


@dataclass(frozen=True)
class TwitterDetails:
    platform: ClassVar[Platform] = Platform.TWITTER
    handle: Optional[str] = None


@dataclass(frozen=True)
class OnlyFansDetails:
    platform: ClassVar[Platform] = Platform.ONLYFANS
    creator: Optional[str] = None


@dataclass(frozen=True)
class FileSharingDetails:
    platform: ClassVar[Platform] = Platform.FILE_SHARING
    host: str = ""


@dataclass(frozen=True)
class ForumDetails:
    platform: ClassVar[Platform] = Platform.FORUM
    thread_path: str = ""


@dataclass(frozen=True)
class UnknownDetails:
    platform: ClassVar[Platform] = Platform.UNKNOWN


PlatformDetails = Union[
    TelegramDetails,
    DiscordDetails,
    RedditDetails,
    TwitterDetails,
    OnlyFansDetails,
    FileSharingDetails,
    ForumDetails,
    UnknownDetails,
]


@dataclass
class DiscoveryResult:
    """Genuinely new, risky location found by a discovery session."""

    url: str
    domain: str
    title: str
    description: str
    platform: Platform
    category: SiteCategory
    risk_score: float
    confidence: float
    discovery_method: str = "multi-api-search"
    matching_patterns: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    detected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: PlatformDetails = field(default_factory=UnknownDetails)

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("URL cannot be empty")
        if not 0 <= self.risk_score <= 100:
            raise ValueError("Risk score must be within [0, 100]")


@dataclass
class DiscoverySession:
    """Progress of one discovery run. Written only by its controller."""

    session_id: str
    user_id: Optional[str]
    brand_profile_id: str
    total_queries: int
    queries_processed: int = 0
    new_sites_found: int = 0
    duplicates_filtered: int = 0
    status: SessionStatus = SessionStatus.RUNNING
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    current_query: Optional[str] = None
    estimated_completion: Optional[datetime] = None
    last_error: Optional[str] = None
    errors: list[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.ERROR)
