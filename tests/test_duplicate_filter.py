"""Tests for the duplicate/variation filter."""

from unittest.mock import AsyncMock

import pytest

from brand_discovery.core import DuplicateFilter, KnownSite, Verdict, normalize_url


def _store(known_sites=None, historical=None) -> AsyncMock:
    store = AsyncMock()
    store.list_known_sites.return_value = known_sites or []
    store.list_historical_urls.return_value = historical or []
    return store


async def _filter(known_sites=None, historical=None) -> DuplicateFilter:
    duplicate_filter = DuplicateFilter(store=_store(known_sites, historical))
    await duplicate_filter.initialize()
    return duplicate_filter


@pytest.mark.asyncio
async def test_classifies_duplicate_variation_and_new() -> None:
    """Test the three buckets against one known site."""
    duplicate_filter = await _filter([KnownSite("https://acme-leaks.to", "acme-leaks.to")])

    result = duplicate_filter.classify([
        "https://acme-leaks.to/x",
        "https://acme-leaks.net/x",
        "https://newsite.co/acme",
    ])

    assert [normalize_url(u) for u in result.duplicate] == ["acme-leaks.to/x"]
    assert [normalize_url(u) for u in result.variation] == ["acme-leaks.net/x"]
    assert [normalize_url(u) for u in result.new] == ["newsite.co/acme"]


@pytest.mark.asyncio
async def test_classification_is_exhaustive_and_disjoint() -> None:
    """Test every input lands in exactly one bucket."""
    duplicate_filter = await _filter(
        [KnownSite("https://example.com", "example.com")],
        ["https://forum.example.org/thread/42"],
    )
    urls = [
        "https://example.com/a",
        "https://examp1e.com/a",
        "https://forum.example.org/thread/43",
        "https://unrelated.io/page",
        "https://www.example.com/",
        "https://brand-new-place.net/x",
    ]

    result = duplicate_filter.classify(urls)

    assert len(result) == len(urls)
    assert sorted(result.new + result.duplicate + result.variation) == sorted(urls)
    assert not set(result.new) & set(result.duplicate)
    assert not set(result.new) & set(result.variation)
    assert not set(result.duplicate) & set(result.variation)


@pytest.mark.asyncio
async def test_known_url_in_any_form_is_duplicate() -> None:
    """Test a corpus member is a duplicate regardless of cosmetic changes."""
    duplicate_filter = await _filter(historical=["https://site.org/post/7"])

    for url in ["https://site.org/post/7", "HTTP://WWW.SITE.ORG/post/7/?utm_source=x#c"]:
        assert duplicate_filter.categorize(url) is Verdict.DUPLICATE


@pytest.mark.asyncio
async def test_homoglyph_domain_is_variation() -> None:
    """Test a confusable spelling of a known domain."""
    duplicate_filter = await _filter([KnownSite("https://example.com", "example.com")])

    assert duplicate_filter.categorize("https://examp1e.com/page") is Verdict.VARIATION


@pytest.mark.asyncio
async def test_near_identical_url_is_variation() -> None:
    """Test edit-distance similarity catches a close historical URL."""
    duplicate_filter = await _filter(historical=["https://mirror-host.xyz/gallery/acme-set-01"])

    assert duplicate_filter.categorize("https://mirrorhost.xyz/gallery/acme-set-02") is Verdict.VARIATION
    assert duplicate_filter.categorize("https://mirror-h0st.xyz/gallery/acme-set-01") is Verdict.VARIATION
    assert duplicate_filter.categorize("https://unrelated.io/x") is Verdict.NEW


@pytest.mark.asyncio
async def test_country_suffix_swap_is_variation() -> None:
    """Test a known site under a two-label suffix matches its other-TLD mirror."""
    duplicate_filter = await _filter([KnownSite("https://acme-leaks.com.br", "acme-leaks.com.br")])

    result = duplicate_filter.classify(["https://acme-leaks.net/x", "https://acme-leaks.com/y"])

    assert [normalize_url(u) for u in result.variation] == ["acme-leaks.net/x", "acme-leaks.com/y"]
    assert result.new == []


@pytest.mark.asyncio
async def test_classify_does_not_modify_corpus() -> None:
    """Test classification is read-only."""
    duplicate_filter = await _filter([KnownSite("https://example.com", "example.com")])
    before = duplicate_filter.get_stats()

    duplicate_filter.classify(["https://fresh.site/a", "https://example.com/b"])

    assert duplicate_filter.get_stats() == before
    assert duplicate_filter.categorize("https://fresh.site/a") is Verdict.NEW


@pytest.mark.asyncio
async def test_added_url_claims_its_domain() -> None:
    """Test add_known_url makes later same-domain URLs duplicates."""
    duplicate_filter = await _filter()

    duplicate_filter.add_known_url("https://newsite.co/acme")

    assert duplicate_filter.categorize("https://newsite.co/other") is Verdict.DUPLICATE
    assert duplicate_filter.categorize("https://newsite.net/acme") is Verdict.VARIATION

    duplicate_filter.remove_known_url("https://newsite.co/acme")
    assert duplicate_filter.categorize("https://newsite.co/other") is Verdict.NEW


@pytest.mark.asyncio
async def test_initialize_failure_leaves_empty_index() -> None:
    """Test that a store failure degrades to classifying everything as new."""
    store = _store()
    store.list_known_sites.side_effect = RuntimeError("db down")
    duplicate_filter = DuplicateFilter(store=store)

    await duplicate_filter.initialize()

    result = duplicate_filter.classify(["https://a.com/x", "https://b.com/y"])
    assert result.new == ["https://a.com/x", "https://b.com/y"]
    assert duplicate_filter.get_stats()["known_urls"] == 0


@pytest.mark.asyncio
async def test_refresh_reloads_from_store() -> None:
    """Test refresh picks up new known sites."""
    store = _store()
    duplicate_filter = DuplicateFilter(store=store)
    await duplicate_filter.initialize()
    assert duplicate_filter.categorize("https://late.site/a") is Verdict.NEW

    store.list_known_sites.return_value = [KnownSite("https://late.site", "late.site")]
    await duplicate_filter.refresh()

    assert duplicate_filter.categorize("https://late.site/a") is Verdict.DUPLICATE
    assert duplicate_filter.get_stats()["known_sites"] == 1


@pytest.mark.asyncio
async def test_analyze_url() -> None:
    """Test detailed analysis confidence levels."""
    duplicate_filter = await _filter([KnownSite("https://example.com", "example.com")])

    known = duplicate_filter.analyze_url("https://www.example.com/a?utm_source=x")
    assert known.is_known
    assert known.confidence == 1.0
    assert known.normalized == "example.com/a"
    assert known.domain == "example.com"
    assert known.path == "/a"

    variation = duplicate_filter.analyze_url("https://example.net/a")
    assert not variation.is_known
    assert variation.is_variation
    assert variation.confidence == 0.8

    fresh = duplicate_filter.analyze_url("https://completely-different.org/zzz")
    assert not fresh.is_known
    assert not fresh.is_variation
    assert 0.0 <= fresh.confidence < 0.85


def test_is_url_suspicious() -> None:
    """Test keyword and TLD heuristics."""
    duplicate_filter = DuplicateFilter()

    report = duplicate_filter.is_url_suspicious("https://free-leaked.to/leaked/video")
    assert report.suspicious
    assert 'Suspicious domain: contains "leaked"' in report.reasons
    assert 'Suspicious domain: contains "free"' in report.reasons
    assert 'Suspicious path: contains "/leaked/"' in report.reasons
    assert "Suspicious TLD: .to" in report.reasons

    clean = duplicate_filter.is_url_suspicious("https://example.com/about")
    assert not clean.suspicious
    assert clean.reasons == []
