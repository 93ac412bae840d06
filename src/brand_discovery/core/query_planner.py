"""Search query planning from a brand profile."""

import re
from typing import Optional

from brand_discovery.core.entities import BrandProfile, QueryPriority, SearchQuery, ViolationPattern

DOMAIN_GUESS_TEMPLATES = (
    "{brand}leaked",
    "{brand}nude",
    "{brand}free",
    "{brand}premium",
    "leaked{brand}",
    "nude{brand}",
    "free{brand}",
)
DOMAIN_GUESS_TLDS = (".com", ".to", ".cc")


class QueryPlanner:
    """Build a prioritized, bounded list of search queries."""

    def __init__(self, max_queries_per_session: int = 100, max_pattern_queries: int = 20) -> None:
        self.max_queries_per_session = max_queries_per_session
        self.max_pattern_queries = max_pattern_queries

    def plan(
        self,
        profile: BrandProfile,
        patterns: Optional[list[ViolationPattern]] = None,
    ) -> list[SearchQuery]:
        """Queries for one session, HIGH before MEDIUM before LOW.

        Never returns more than `max_queries_per_session` queries; order within
        a priority is the order of generation.
        """
        queries = self.brand_queries(profile)
        if patterns:
            queries.extend(self.pattern_queries(profile, patterns))
        queries.extend(self.domain_guess_queries(profile))

        return self.prioritize(self._unique(queries))[: self.max_queries_per_session]

    def brand_queries(self, profile: BrandProfile) -> list[SearchQuery]:
        """Brand identity, name variation and keyword combination queries."""
        brand = profile.name
        queries = [
            SearchQuery(
                terms=(brand, "leaked"),
                exclude_terms=("official", "store", "shop"),
                max_results=50,
                priority=QueryPriority.HIGH,
            ),
            SearchQuery(
                terms=(brand, "nude"),
                exclude_terms=("official", "news"),
                max_results=50,
                priority=QueryPriority.HIGH,
            ),
            SearchQuery(
                terms=(brand, "onlyfans"),
                exclude_terms=("official",),
                max_results=30,
                priority=QueryPriority.HIGH,
            ),
        ]

        for variation in profile.variations:
            if variation.strip():
                queries.append(SearchQuery(
                    terms=(variation.strip(), "leaked"),
                    max_results=30,
                    priority=QueryPriority.MEDIUM,
                ))

        for keyword in profile.keywords:
            if keyword.strip():
                queries.append(SearchQuery(
                    terms=(brand, keyword.strip(), "leaked"),
                    max_results=20,
                    priority=QueryPriority.MEDIUM,
                ))

        return queries

    def pattern_queries(
        self, profile: BrandProfile, patterns: list[ViolationPattern]
    ) -> list[SearchQuery]:
        """Queries derived from the most relevant historical patterns."""
        queries = []
        for pattern in patterns[: self.max_pattern_queries]:
            if pattern.common_keywords:
                queries.append(SearchQuery(
                    terms=(profile.name, *pattern.common_keywords[:2]),
                    max_results=25,
                    priority=QueryPriority.MEDIUM,
                ))
            if pattern.platform_type:
                queries.append(SearchQuery(
                    terms=(profile.name,),
                    site_restriction=pattern.platform_type,
                    max_results=20,
                    priority=QueryPriority.LOW,
                ))
        return queries

    def domain_guess_queries(self, profile: BrandProfile) -> list[SearchQuery]:
        """`site:` queries over synthesized candidate domains."""
        brand = re.sub(r"[^a-z0-9-]", "", profile.name.lower())
        if not brand:
            return []

        queries = []
        for template in DOMAIN_GUESS_TEMPLATES:
            stem = template.format(brand=brand)
            sites = " OR ".join(f"site:{stem}{tld}" for tld in DOMAIN_GUESS_TLDS)
            queries.append(SearchQuery(
                terms=(sites,),
                max_results=15,
                priority=QueryPriority.LOW,
            ))
        return queries

    @staticmethod
    def prioritize(queries: list[SearchQuery]) -> list[SearchQuery]:
        return sorted(queries, key=lambda q: q.priority.rank, reverse=True)

    @staticmethod
    def _unique(queries: list[SearchQuery]) -> list[SearchQuery]:
        seen = set()
        unique = []
        for query in queries:
            key = (tuple(t.lower() for t in query.terms), query.site_restriction)
            if key not in seen:
                seen.add(key)
                unique.append(query)
        return unique
