"""Pattern mining over historical violation URLs."""

import logging
import re
from collections import Counter
from typing import Optional

from brand_discovery.core.duplicate_filter import DuplicateFilter
from brand_discovery.core.entities import ViolationPattern
from brand_discovery.core.interfaces import KnownSiteStore
from brand_discovery.core.url_normalizer import extract_domain, extract_path, normalize_url
from brand_discovery.core.variants import split_domain

logger = logging.getLogger(__name__)

PLATFORM_HOSTS = (
    "t.me", "telegram", "discord", "reddit", "twitter", "x.com",
    "mega.nz", "mediafire", "dropbox", "drive.google", "forum",
)

STOPWORDS = frozenset({
    "www", "http", "https", "html", "index", "page", "post", "posts", "view", "with",
    "from", "that", "this", "the", "and",
})


def _tokens(text: str) -> list[str]:
    return [
        token
        for token in re.split(r"[^a-z0-9]+", text.lower())
        if len(token) > 3 and not token.isdigit() and token not in STOPWORDS
    ]


class HistoricalAnalyzer:
    """Derive violation patterns from previously taken-down URLs.

    Patterns are computed once per loaded snapshot and reused; call
    `invalidate` after the history changes.
    """

    def __init__(
        self,
        store: Optional[KnownSiteStore] = None,
        duplicate_filter: Optional[DuplicateFilter] = None,
        historical_url_limit: int = 20000,
        min_frequency: int = 2,
    ) -> None:
        self.store = store
        self.duplicate_filter = duplicate_filter
        self.historical_url_limit = historical_url_limit
        self.min_frequency = min_frequency
        self._urls: Optional[list[str]] = None
        self._patterns: Optional[list[ViolationPattern]] = None

    def invalidate(self) -> None:
        self._urls = None
        self._patterns = None

    async def load_urls(self) -> list[str]:
        """Historical URLs, fetched from the store once."""
        if self._urls is not None:
            return self._urls

        if self.store is None:
            self._urls = []
            return self._urls

        try:
            self._urls = await self.store.list_historical_urls(self.historical_url_limit)
        except Exception:
            logger.exception("Could not load historical URLs for pattern analysis")
            self._urls = []
        return self._urls

    async def analyze_patterns(self) -> list[ViolationPattern]:
        """All patterns, most frequent first."""
        if self._patterns is not None:
            return self._patterns

        urls = await self.load_urls()
        patterns = (
            self.analyze_domain_patterns(urls)
            + self.analyze_path_patterns(urls)
            + self.analyze_keyword_patterns(urls)
            + self.analyze_platform_patterns(urls)
        )
        patterns.sort(key=lambda p: p.frequency, reverse=True)
        self._patterns = patterns
        logger.info("Derived %d violation patterns from %d historical URLs", len(patterns), len(urls))
        return patterns

    def analyze_domain_patterns(self, urls: list[str]) -> list[ViolationPattern]:
        """Recurring top-level domains, e.g. ``.to`` or ``.cc``."""
        tlds: Counter[str] = Counter()
        for url in urls:
            _, tld = split_domain(extract_domain(url))
            if tld:
                tlds[tld] += 1

        return [
            ViolationPattern(
                url_pattern=tld,
                platform_type=tld.lstrip("."),
                path_structure="*",
                frequency=count,
            )
            for tld, count in tlds.most_common()
            if count >= self.min_frequency
        ]

    def analyze_path_patterns(self, urls: list[str]) -> list[ViolationPattern]:
        """Recurring first path segments, e.g. ``/leaked/``."""
        segments: Counter[str] = Counter()
        for url in urls:
            parts = [p for p in extract_path(url).lower().split("/") if p]
            if len(parts) > 1 and not parts[0].isdigit():
                segments[parts[0]] += 1

        return [
            ViolationPattern(
                url_pattern=f"/{segment}/",
                common_keywords=_tokens(segment)[:2],
                path_structure=f"/{segment}/*",
                frequency=count,
            )
            for segment, count in segments.most_common()
            if count >= self.min_frequency
        ]

    def analyze_keyword_patterns(self, urls: list[str]) -> list[ViolationPattern]:
        """Recurring tokens with the token they most often appear with."""
        counts: Counter[str] = Counter()
        pairs: dict[str, Counter[str]] = {}
        for url in urls:
            tokens = sorted(set(_tokens(normalize_url(url).split("?", 1)[0])))
            counts.update(tokens)
            for token in tokens:
                companions = pairs.setdefault(token, Counter())
                companions.update(t for t in tokens if t != token)

        patterns = []
        for token, count in counts.most_common(50):
            if count < self.min_frequency:
                break
            keywords = [token]
            companion = pairs[token].most_common(1)
            if companion and companion[0][1] >= self.min_frequency:
                keywords.append(companion[0][0])
            patterns.append(ViolationPattern(url_pattern=token, common_keywords=keywords, frequency=count))
        return patterns

    def analyze_platform_patterns(self, urls: list[str]) -> list[ViolationPattern]:
        """Hosts of well-known platforms used to spread leaked content."""
        hosts: Counter[str] = Counter()
        for url in urls:
            domain = extract_domain(url)
            if any(marker in domain for marker in PLATFORM_HOSTS):
                hosts[domain] += 1

        return [
            ViolationPattern(url_pattern=host, platform_type=host, frequency=count)
            for host, count in hosts.most_common()
            if count >= self.min_frequency
        ]

    def calculate_similarity(self, url: str) -> float:
        """Closeness of `url` to the known corpus, in [0, 1]."""
        if self.duplicate_filter is None:
            return 0.0
        return self.duplicate_filter.best_similarity(url)

    async def find_matching_patterns(self, url: str) -> list[ViolationPattern]:
        patterns = await self.analyze_patterns()
        normalized = normalize_url(url)
        domain = extract_domain(url)
        path = extract_path(url).lower()
        matches = []
        for pattern in patterns:
            if pattern.url_pattern.startswith("."):
                matched = domain.endswith(pattern.url_pattern)
            elif pattern.url_pattern.startswith("/"):
                matched = path.startswith(pattern.url_pattern)
            else:
                matched = pattern.url_pattern in normalized
            if matched:
                matches.append(pattern)
        return matches
