"""Risk scoring and platform classification of newly discovered URLs."""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from brand_discovery.config import ScoringConfig
from brand_discovery.core.entities import (
    BrandProfile,
    DiscordDetails,
    DiscoveryResult,
    FileSharingDetails,
    ForumDetails,
    OnlyFansDetails,
    Platform,
    PlatformDetails,
    RedditDetails,
    SearchResult,
    SiteCategory,
    TelegramDetails,
    TwitterDetails,
    UnknownDetails,
)
from brand_discovery.core.historical_analyzer import HistoricalAnalyzer
from brand_discovery.core.url_normalizer import extract_domain, extract_path

logger = logging.getLogger(__name__)

SUSPICIOUS_KEYWORDS = (
    "leaked", "nude", "naked", "sex", "porn", "nsfw", "onlyfans", "premium", "exclusive",
)
EXTRA_KEYWORDS = ("free", "download")
SUSPICIOUS_DOMAIN_SUBSTRINGS = ("leaked", "nude")
HIGH_RISK_PATH_MARKERS = ("/leaked/", "/nude/")
RISKY_PATH_MARKERS = ("/download/", "/free/")

# Checked in order; first match wins
PLATFORM_MARKERS: tuple[tuple[Platform, tuple[str, ...]], ...] = (
    (Platform.TELEGRAM, ("telegram", "t.me")),
    (Platform.DISCORD, ("discord",)),
    (Platform.REDDIT, ("reddit",)),
    (Platform.TWITTER, ("twitter",)),
    (Platform.ONLYFANS, ("onlyfans",)),
    (Platform.FILE_SHARING, ("mega", "mediafire", "dropbox", "zippyshare", "rapidgator")),
    (Platform.FORUM, ("forum",)),
)
FILE_SHARING_TLDS = (".to", ".cc")

CATEGORY_MARKERS: tuple[tuple[SiteCategory, tuple[str, ...], bool], ...] = (
    # (category, markers, also match the domain)
    (SiteCategory.FORUM, ("forum",), True),
    (SiteCategory.SOCIAL_MEDIA, ("social",), True),
    (SiteCategory.FILE_SHARING, ("download", "file"), False),
    (SiteCategory.ADULT_CONTENT, ("adult", "xxx"), False),
    (SiteCategory.MESSAGING, ("telegram", "discord"), False),
)


def _first_path_segment(url: str) -> Optional[str]:
    parts = [p for p in extract_path(url).split("/") if p]
    return parts[0] if parts else None


class RiskScorer:
    """Deterministic additive risk score (0-100) plus platform and category."""

    def __init__(
        self,
        profile: BrandProfile,
        weights: Optional[ScoringConfig] = None,
        historical_analyzer: Optional[HistoricalAnalyzer] = None,
    ) -> None:
        self.profile = profile
        self.weights = weights or ScoringConfig()
        self.historical_analyzer = historical_analyzer
        self.brand = profile.name.lower()
        self.brand_names = [self.brand] + [v.lower() for v in profile.variations if v.strip()]

    def score(self, url: str, result: SearchResult) -> float:
        """Risk score clamped to [0, 100]."""
        w = self.weights
        text = self._text(result)
        domain = extract_domain(url)
        lowered_url = url.lower()
        score = 0.0

        if any(name in text for name in self.brand_names):
            score += w.brand_mention
        score += w.suspicious_keyword * sum(1 for kw in SUSPICIOUS_KEYWORDS if kw in text)

        compact_brand = re.sub(r"\s+", "", self.brand)
        if compact_brand and compact_brand in domain:
            score += w.brand_in_domain
        if any(part in domain for part in SUSPICIOUS_DOMAIN_SUBSTRINGS):
            score += w.suspicious_domain

        if self.historical_analyzer is not None:
            similarity = self.historical_analyzer.calculate_similarity(url)
            score += max(0.0, min(1.0, similarity)) * w.historical_similarity_max

        if any(marker in lowered_url for marker in HIGH_RISK_PATH_MARKERS):
            score += w.high_risk_path
        if any(marker in lowered_url for marker in RISKY_PATH_MARKERS):
            score += w.risky_path

        return max(0.0, min(100.0, score))

    def detect_platform(self, url: str, result: SearchResult) -> Platform:
        domain = extract_domain(url)
        text = self._text(result)
        for platform, markers in PLATFORM_MARKERS:
            if any(marker in domain or marker in text for marker in markers):
                return platform
        if domain.endswith(FILE_SHARING_TLDS):
            return Platform.FILE_SHARING
        return Platform.UNKNOWN

    def categorize_site(self, url: str, result: SearchResult) -> SiteCategory:
        domain = extract_domain(url)
        text = self._text(result)
        for category, markers, check_domain in CATEGORY_MARKERS:
            for marker in markers:
                if marker in text or (check_domain and marker in domain):
                    return category
        return SiteCategory.UNKNOWN

    def extract_keywords(self, result: SearchResult) -> list[str]:
        text = self._text(result)
        keywords = []
        if self.brand in text:
            keywords.append(self.brand)
        for keyword in SUSPICIOUS_KEYWORDS + EXTRA_KEYWORDS:
            if keyword in text and keyword not in keywords:
                keywords.append(keyword)
        return keywords

    def platform_details(self, url: str, platform: Platform) -> PlatformDetails:
        """Platform-specific identifiers parsed from the URL."""
        segment = _first_path_segment(url)
        domain = extract_domain(url)

        if platform is Platform.TELEGRAM:
            return TelegramDetails(channel=segment)
        if platform is Platform.DISCORD:
            invite = extract_path(url).rstrip("/").rsplit("/", 1)[-1] or None
            return DiscordDetails(invite_code=invite)
        if platform is Platform.REDDIT:
            match = re.search(r"/r/([^/?#]+)", url)
            return RedditDetails(subreddit=match.group(1) if match else None)
        if platform is Platform.TWITTER:
            return TwitterDetails(handle=segment)
        if platform is Platform.ONLYFANS:
            return OnlyFansDetails(creator=segment)
        if platform is Platform.FILE_SHARING:
            return FileSharingDetails(host=domain)
        if platform is Platform.FORUM:
            return ForumDetails(thread_path=extract_path(url))
        return UnknownDetails()

    async def build_result(self, url: str, result: SearchResult) -> DiscoveryResult:
        """Score and classify one new URL."""
        risk_score = self.score(url, result)
        platform = self.detect_platform(url, result)

        matching_patterns: list[str] = []
        if self.historical_analyzer is not None:
            try:
                patterns = await self.historical_analyzer.find_matching_patterns(url)
                matching_patterns = [p.url_pattern for p in patterns]
            except Exception:
                logger.warning("Could not match historical patterns for %s", url, exc_info=True)

        return DiscoveryResult(
            url=url,
            domain=extract_domain(url),
            title=result.title,
            description=result.snippet or "",
            platform=platform,
            category=self.categorize_site(url, result),
            risk_score=risk_score,
            confidence=risk_score / 100,
            discovery_method="multi-api-search",
            matching_patterns=matching_patterns,
            keywords=self.extract_keywords(result),
            detected_at=datetime.now(timezone.utc),
            details=self.platform_details(url, platform),
        )

    @staticmethod
    def _text(result: SearchResult) -> str:
        return f"{result.title} {result.snippet or ''}".lower()
