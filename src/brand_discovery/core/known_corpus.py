"""In-process snapshot of every URL and domain already known."""

import threading
from collections import Counter
from itertools import islice
from typing import Optional

from brand_discovery.core.entities import KnownEntry, KnownSite
from brand_discovery.core.url_normalizer import extract_domain, normalize_url
from brand_discovery.core.variants import DEFAULT_MAX_VARIANTS, generate_domain_variants


class KnownCorpusIndex:
    """Known URLs and domains with exact and variant membership tests.

    Built from known sites and historical violation URLs. Single-key membership
    tests do not lock. Writers (`add`, `remove`, `replace`) and reads that walk a
    shared collection (`variant_source`, `recent`) are serialized so sessions on
    different threads can share one index.
    """

    def __init__(self, max_variants: int = DEFAULT_MAX_VARIANTS) -> None:
        self.max_variants = max_variants
        self._lock = threading.Lock()
        self._urls: dict[str, KnownEntry] = {}
        self._domains: Counter[str] = Counter()
        self._variant_sources: dict[str, set[str]] = {}
        self._variant_owners: Counter[str] = Counter()
        self._variant_entries: set[str] = set()
        self._known_sites = 0

    def replace(self, known_sites: list[KnownSite], historical_urls: list[str]) -> None:
        """Swap in a fresh snapshot."""
        urls: dict[str, KnownEntry] = {}
        domains: Counter[str] = Counter()
        variant_sources: dict[str, set[str]] = {}
        variant_owners: Counter[str] = Counter()
        variant_entries: set[str] = set()

        # Historical first so known sites count as the most recent entries
        for url in historical_urls:
            entry = self._entry(url)
            if entry.normalized_url not in urls:
                urls[entry.normalized_url] = entry
                domains[entry.domain] += 1

        for site in known_sites:
            entry = KnownEntry(
                normalize_url(site.base_url),
                extract_domain(site.domain or site.base_url),
            )
            if entry.normalized_url in variant_entries:
                continue
            previous = urls.pop(entry.normalized_url, None)
            urls[entry.normalized_url] = entry
            if previous is None:
                domains[entry.domain] += 1
            elif previous.domain != entry.domain:
                domains[previous.domain] -= 1
                if domains[previous.domain] <= 0:
                    del domains[previous.domain]
                domains[entry.domain] += 1
            variant_entries.add(entry.normalized_url)
            self._register_variants(entry.domain, variant_sources, variant_owners)

        with self._lock:
            self._urls = urls
            self._domains = domains
            self._variant_sources = variant_sources
            self._variant_owners = variant_owners
            self._variant_entries = variant_entries
            self._known_sites = len(variant_entries)

    def add(self, url: str) -> Optional[KnownEntry]:
        """Record a URL and its domain. Returns None if it was already known."""
        entry = self._entry(url)
        with self._lock:
            if entry.normalized_url in self._urls:
                return None
            self._urls[entry.normalized_url] = entry
            self._domains[entry.domain] += 1
            self._variant_entries.add(entry.normalized_url)
            self._register_variants(entry.domain, self._variant_sources, self._variant_owners)
        return entry

    def remove(self, url: str) -> bool:
        """Forget a URL previously known. Returns False if it was not."""
        normalized = normalize_url(url)
        with self._lock:
            entry = self._urls.pop(normalized, None)
            if entry is None:
                return False
            self._domains[entry.domain] -= 1
            if self._domains[entry.domain] <= 0:
                del self._domains[entry.domain]
            if normalized in self._variant_entries:
                self._variant_entries.discard(normalized)
                self._unregister_variants(entry.domain)
        return True

    def contains_url(self, normalized_url: str) -> bool:
        return normalized_url in self._urls

    def contains_domain(self, domain: str) -> bool:
        return domain in self._domains

    def variant_source(self, domain: str) -> Optional[str]:
        """Known domain of which `domain` is a precomputed variant, if any."""
        with self._lock:
            sources = self._variant_sources.get(domain)
            if not sources:
                return None
            return min(sources)

    def recent(self, limit: int) -> list[str]:
        """Up to `limit` normalized URLs, most recently added first."""
        with self._lock:
            return list(islice(reversed(self._urls.keys()), limit))

    def __len__(self) -> int:
        return len(self._urls)

    def stats(self) -> dict[str, int]:
        return {
            "known_sites": self._known_sites,
            "known_urls": len(self._urls),
            "known_domains": len(self._domains),
            "domain_variations": len(self._variant_owners),
        }

    def _entry(self, url: str) -> KnownEntry:
        return KnownEntry(normalize_url(url), extract_domain(url))

    def _register_variants(
        self,
        domain: str,
        variant_sources: dict[str, set[str]],
        variant_owners: Counter[str],
    ) -> None:
        variant_owners[domain] += 1
        if variant_owners[domain] > 1:
            return
        for variant in generate_domain_variants(domain, self.max_variants):
            variant_sources.setdefault(variant, set()).add(domain)

    def _unregister_variants(self, domain: str) -> None:
        if domain not in self._variant_owners:
            return
        self._variant_owners[domain] -= 1
        if self._variant_owners[domain] > 0:
            return
        del self._variant_owners[domain]
        for variant in generate_domain_variants(domain, self.max_variants):
            sources = self._variant_sources.get(variant)
            if sources is None:
                continue
            sources.discard(domain)
            if not sources:
                del self._variant_sources[variant]
