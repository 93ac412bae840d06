"""Classification of candidate URLs against the known corpus."""

import logging
from enum import Enum
from typing import Optional

from brand_discovery.core.entities import ClassificationResult, SuspicionReport, UrlAnalysis
from brand_discovery.core.interfaces import KnownSiteStore
from brand_discovery.core.known_corpus import KnownCorpusIndex
from brand_discovery.core.similarity import DEFAULT_SIMILARITY_THRESHOLD, best_match
from brand_discovery.core.url_normalizer import extract_domain, extract_path, normalize_url
from brand_discovery.core.variants import (
    DEFAULT_MAX_VARIANTS,
    generate_domain_variants,
    generate_url_variants,
)

logger = logging.getLogger(__name__)

SUSPICIOUS_DOMAIN_WORDS = (
    "leaked", "nude", "free", "download", "torrent", "pirate", "crack", "hack", "xxx", "porn",
)
SUSPICIOUS_PATH_SEGMENTS = (
    "/leaked/", "/nude/", "/download/", "/free/", "/torrent/", "/crack/", "/pirate/",
)
SUSPICIOUS_TLDS = (".tk", ".ml", ".ga", ".cf", ".to", ".cc")


class Verdict(str, Enum):
    """Bucket a candidate URL falls into."""

    NEW = "new"
    DUPLICATE = "duplicate"
    VARIATION = "variation"


class DuplicateFilter:
    """Sort candidate URLs into new, duplicate and variation.

    Lookups run cheapest first: exact URL, exact domain, generated variants,
    and only then edit-distance similarity against the `similarity_sample_size`
    most recent corpus entries. The sample bound trades recall of the fuzzy
    step for predictable latency; raise it for precision, lower it for speed.
    """

    def __init__(
        self,
        store: Optional[KnownSiteStore] = None,
        index: Optional[KnownCorpusIndex] = None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        similarity_sample_size: int = 1000,
        max_variants: int = DEFAULT_MAX_VARIANTS,
        historical_url_limit: int = 20000,
    ) -> None:
        self.store = store
        self.index = index or KnownCorpusIndex(max_variants=max_variants)
        self.similarity_threshold = similarity_threshold
        self.similarity_sample_size = similarity_sample_size
        self.max_variants = max_variants
        self.historical_url_limit = historical_url_limit

    async def initialize(self) -> None:
        """Load the corpus from the store.

        On failure the index is left empty and everything classifies as new.
        """
        if self.store is None:
            return

        try:
            known_sites = await self.store.list_known_sites()
            historical_urls = await self.store.list_historical_urls(self.historical_url_limit)
        except Exception:
            logger.exception("Could not load known corpus, continuing with an empty index")
            self.index.replace([], [])
            return

        self.index.replace(known_sites, historical_urls)
        logger.info(
            "Duplicate filter initialized with %d known sites and %d known URLs",
            len(known_sites),
            len(self.index),
        )

    async def refresh(self) -> None:
        """Reload the corpus snapshot from the store."""
        await self.initialize()

    def classify(self, urls: list[str]) -> ClassificationResult:
        """Classify every URL; each lands in exactly one bucket.

        Does not modify the corpus.
        """
        result = ClassificationResult()
        for url in urls:
            verdict = self.categorize(url)
            getattr(result, verdict.value).append(url)
        return result

    def categorize(self, url: str) -> Verdict:
        normalized = normalize_url(url)
        domain = extract_domain(url)

        if self.index.contains_url(normalized):
            return Verdict.DUPLICATE
        if domain and self.index.contains_domain(domain):
            return Verdict.DUPLICATE
        if self.is_variation(normalized, domain):
            return Verdict.VARIATION
        return Verdict.NEW

    def is_known(self, url: str) -> bool:
        """Exact URL or domain already in the corpus."""
        domain = extract_domain(url)
        return self.index.contains_url(normalize_url(url)) or (
            bool(domain) and self.index.contains_domain(domain)
        )

    def is_variation(self, normalized: str, domain: str) -> bool:
        for variant in generate_url_variants(normalized, self.max_variants):
            if self.index.contains_url(variant):
                logger.debug("%s is a URL variant of %s", normalized, variant)
                return True

        if domain:
            source = self.index.variant_source(domain)
            if source:
                logger.debug("%s is a domain variant of %s", domain, source)
                return True
            for variant in generate_domain_variants(domain, self.max_variants):
                if self.index.contains_domain(variant):
                    logger.debug("%s is a domain variant of %s", domain, variant)
                    return True

        score, match = self._best_similarity(normalized, self.similarity_threshold)
        if score >= self.similarity_threshold:
            logger.debug("%s is %.2f similar to %s", normalized, score, match)
            return True
        return False

    def analyze_url(self, url: str) -> UrlAnalysis:
        """Compare one URL against the corpus in detail."""
        normalized = normalize_url(url)
        domain = extract_domain(url)
        is_known = self.is_known(url)
        is_variation = not is_known and self.is_variation(normalized, domain)

        if is_known:
            confidence = 1.0
        elif is_variation:
            confidence = 0.8
        else:
            confidence, _ = self._best_similarity(normalized)

        return UrlAnalysis(
            normalized=normalized,
            domain=domain,
            path=extract_path(url),
            is_known=is_known,
            is_variation=is_variation,
            confidence=confidence,
        )

    def best_similarity(self, url: str) -> float:
        """Highest similarity of `url` to the sampled corpus, in [0, 1]."""
        score, _ = self._best_similarity(normalize_url(url))
        return score

    def add_known_url(self, url: str) -> None:
        self.index.add(url)

    def remove_known_url(self, url: str) -> None:
        self.index.remove(url)

    def get_stats(self) -> dict[str, int]:
        return self.index.stats()

    def is_url_suspicious(self, url: str) -> SuspicionReport:
        """Flag URLs by fixed keyword and TLD lists. Not used for deduplication."""
        reasons: list[str] = []
        domain = extract_domain(url)
        path = extract_path(url).lower()
        if not path.endswith("/"):
            path += "/"

        for word in SUSPICIOUS_DOMAIN_WORDS:
            if word in domain:
                reasons.append(f'Suspicious domain: contains "{word}"')

        for segment in SUSPICIOUS_PATH_SEGMENTS:
            if segment in path:
                reasons.append(f'Suspicious path: contains "{segment}"')

        for tld in SUSPICIOUS_TLDS:
            if domain.endswith(tld):
                reasons.append(f"Suspicious TLD: {tld}")
                break

        return SuspicionReport(suspicious=bool(reasons), reasons=reasons)

    def _best_similarity(self, normalized: str, threshold: float = 0.0) -> tuple[float, str]:
        sample = self.index.recent(self.similarity_sample_size)
        return best_match(normalized, sample, threshold)
