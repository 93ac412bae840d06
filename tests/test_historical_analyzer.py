"""Tests for historical violation-pattern analysis."""

from unittest.mock import AsyncMock, Mock

import pytest

from brand_discovery.core import HistoricalAnalyzer

HISTORY = [
    "https://a.to/leaked/1",
    "https://b.to/leaked/2",
    "https://t.me/acmevault",
    "https://t.me/acmevault2",
]


def _analyzer(urls=None) -> tuple[HistoricalAnalyzer, AsyncMock]:
    store = AsyncMock()
    store.list_historical_urls.return_value = HISTORY if urls is None else urls
    return HistoricalAnalyzer(store=store), store


def test_domain_patterns() -> None:
    """Test recurring TLDs become patterns."""
    analyzer, _ = _analyzer()

    patterns = {p.url_pattern: p for p in analyzer.analyze_domain_patterns(HISTORY)}

    assert patterns[".to"].frequency == 2
    assert patterns[".to"].platform_type == "to"
    assert patterns[".me"].frequency == 2


def test_domain_patterns_group_by_public_suffix() -> None:
    """Test two-label suffixes are counted whole."""
    analyzer, _ = _analyzer()
    urls = ["https://acme.com.br/a", "https://mirror.com.br/b", "https://other.com/c"]

    patterns = {p.url_pattern: p.frequency for p in analyzer.analyze_domain_patterns(urls)}

    assert patterns == {".com.br": 2}


def test_path_patterns() -> None:
    """Test recurring first path segments."""
    analyzer, _ = _analyzer()

    patterns = analyzer.analyze_path_patterns(HISTORY)

    assert [p.url_pattern for p in patterns] == ["/leaked/"]
    assert patterns[0].path_structure == "/leaked/*"
    assert patterns[0].common_keywords == ["leaked"]


def test_keyword_and_platform_patterns() -> None:
    """Test recurring tokens and platform hosts."""
    analyzer, _ = _analyzer()

    keywords = analyzer.analyze_keyword_patterns(HISTORY)
    platforms = analyzer.analyze_platform_patterns(HISTORY)

    assert [p.url_pattern for p in keywords] == ["leaked"]
    assert [(p.url_pattern, p.frequency) for p in platforms] == [("t.me", 2)]


@pytest.mark.asyncio
async def test_analyze_patterns_is_cached() -> None:
    """Test the store is read once until invalidated."""
    analyzer, store = _analyzer()

    first = await analyzer.analyze_patterns()
    second = await analyzer.analyze_patterns()

    assert first is second
    assert store.list_historical_urls.await_count == 1
    frequencies = [p.frequency for p in first]
    assert frequencies == sorted(frequencies, reverse=True)

    analyzer.invalidate()
    await analyzer.analyze_patterns()
    assert store.list_historical_urls.await_count == 2


@pytest.mark.asyncio
async def test_store_failure_yields_no_patterns() -> None:
    """Test a failing store degrades to an empty history."""
    analyzer, store = _analyzer()
    store.list_historical_urls.side_effect = RuntimeError("db down")

    assert await analyzer.analyze_patterns() == []


@pytest.mark.asyncio
async def test_find_matching_patterns() -> None:
    """Test TLD, path and token patterns match a new URL."""
    analyzer, _ = _analyzer()

    matches = await analyzer.find_matching_patterns("https://c.to/leaked/9")

    assert {p.url_pattern for p in matches} == {".to", "/leaked/", "leaked"}


def test_calculate_similarity_delegates_to_filter() -> None:
    """Test similarity comes from the duplicate filter."""
    duplicate_filter = Mock()
    duplicate_filter.best_similarity.return_value = 0.9

    assert HistoricalAnalyzer(duplicate_filter=duplicate_filter).calculate_similarity("https://x.to") == 0.9
    assert HistoricalAnalyzer().calculate_similarity("https://x.to") == 0.0
