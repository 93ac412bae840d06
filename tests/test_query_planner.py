"""Tests for query planning."""

from brand_discovery.core import (
    BrandProfile,
    QueryPlanner,
    QueryPriority,
    SearchQuery,
    ViolationPattern,
    build_query_string,
)


def _profile() -> BrandProfile:
    return BrandProfile(id="p1", name="Acme", variations=["AcmeX"], keywords=["vip"])


def test_brand_queries() -> None:
    """Test brand identity, variation and keyword queries."""
    queries = QueryPlanner().brand_queries(_profile())

    assert queries[0] == SearchQuery(
        terms=("Acme", "leaked"),
        exclude_terms=("official", "store", "shop"),
        max_results=50,
        priority=QueryPriority.HIGH,
    )
    assert [q.terms for q in queries] == [
        ("Acme", "leaked"),
        ("Acme", "nude"),
        ("Acme", "onlyfans"),
        ("AcmeX", "leaked"),
        ("Acme", "vip", "leaked"),
    ]
    assert [q.priority for q in queries[3:]] == [QueryPriority.MEDIUM, QueryPriority.MEDIUM]


def test_plan_orders_by_priority() -> None:
    """Test HIGH before MEDIUM before LOW."""
    queries = QueryPlanner().plan(_profile())

    ranks = [q.priority.rank for q in queries]
    assert ranks == sorted(ranks, reverse=True)
    assert queries[0].priority is QueryPriority.HIGH
    assert queries[-1].priority is QueryPriority.LOW
    assert len(queries) == 3 + 2 + 7


def test_plan_respects_cap() -> None:
    """Test the planned list never exceeds the per-session maximum."""
    queries = QueryPlanner(max_queries_per_session=4).plan(_profile())

    assert len(queries) == 4
    assert [q.priority for q in queries[:3]] == [QueryPriority.HIGH] * 3

    assert QueryPlanner(max_queries_per_session=0).plan(_profile()) == []


def test_pattern_queries() -> None:
    """Test keyword and platform patterns become queries."""
    patterns = [
        ViolationPattern(url_pattern="vault", common_keywords=["vault", "pack"], frequency=5),
        ViolationPattern(url_pattern=".to", platform_type="to", frequency=3),
    ]

    queries = QueryPlanner().plan(_profile(), patterns)

    assert any(q.terms == ("Acme", "vault", "pack") for q in queries)
    site_queries = [q for q in queries if q.site_restriction == "to"]
    assert len(site_queries) == 1
    assert site_queries[0].priority is QueryPriority.LOW


def test_pattern_queries_are_bounded() -> None:
    """Test only the first patterns are used."""
    patterns = [ViolationPattern(url_pattern=f"k{i}", common_keywords=[f"k{i}"]) for i in range(30)]

    queries = QueryPlanner(max_pattern_queries=5).pattern_queries(_profile(), patterns)

    assert len(queries) == 5


def test_plan_deduplicates_queries() -> None:
    """Test a pattern repeating a brand query is dropped."""
    patterns = [ViolationPattern(url_pattern="leaked", common_keywords=["leaked"])]

    queries = QueryPlanner().plan(_profile(), patterns)

    assert sum(1 for q in queries if q.terms == ("Acme", "leaked")) == 1


def test_domain_guess_queries() -> None:
    """Test synthesized site: queries."""
    queries = QueryPlanner().domain_guess_queries(BrandProfile(id="p", name="Acme Co"))

    assert len(queries) == 7
    assert queries[0].terms == ("site:acmecoleaked.com OR site:acmecoleaked.to OR site:acmecoleaked.cc",)
    assert all(q.priority is QueryPriority.LOW for q in queries)


def test_build_query_string() -> None:
    """Test search-engine syntax rendering."""
    query = SearchQuery(
        terms=("Acme", "leaked"),
        exclude_terms=("official", "store"),
        site_restriction="reddit.com",
    )

    assert build_query_string(query) == 'Acme leaked -"official" -"store" site:reddit.com'
    assert build_query_string(SearchQuery(terms=("Acme",))) == "Acme"
