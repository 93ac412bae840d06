"""Tests for the YAML-file stores."""

from datetime import datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from brand_discovery.adapters.storage import YAMLKnownSiteStore, YAMLSessionStore
from brand_discovery.core import DiscoveryResult, KnownSiteConflictError, Platform, SiteCategory


def _result(url: str = "https://newsite.co/acme") -> DiscoveryResult:
    return DiscoveryResult(
        url=url,
        domain="newsite.co",
        title="Acme leaked",
        description="",
        platform=Platform.UNKNOWN,
        category=SiteCategory.UNKNOWN,
        risk_score=70.4,
        confidence=0.704,
        keywords=["acme", "leaked"],
    )


@pytest.mark.asyncio
async def test_create_and_list_known_sites() -> None:
    """Test a created site is listed back."""
    with TemporaryDirectory() as tmpdir:
        store = YAMLKnownSiteStore(Path(tmpdir) / "known_sites", Path(tmpdir) / "history")

        await store.create_known_site(_result(), user_id="user-1")
        sites = await store.list_known_sites()

        assert len(sites) == 1
        assert sites[0].base_url == "https://newsite.co/acme"
        assert sites[0].domain == "newsite.co"
        assert len(list((Path(tmpdir) / "known_sites").glob("newsite-co_*.yaml"))) == 1


@pytest.mark.asyncio
async def test_duplicate_known_site_conflicts() -> None:
    """Test the same base URL cannot be stored twice."""
    with TemporaryDirectory() as tmpdir:
        store = YAMLKnownSiteStore(Path(tmpdir) / "known_sites", Path(tmpdir) / "history")
        await store.create_known_site(_result())

        with pytest.raises(KnownSiteConflictError) as exc_info:
            await store.create_known_site(_result())

        assert exc_info.value.base_url == "https://newsite.co/acme"
        await store.create_known_site(_result("https://newsite.co/other"))
        assert len(await store.list_known_sites()) == 2


@pytest.mark.asyncio
async def test_historical_urls() -> None:
    """Test recorded violation URLs are listed up to the limit."""
    with TemporaryDirectory() as tmpdir:
        store = YAMLKnownSiteStore(Path(tmpdir) / "known_sites", Path(tmpdir) / "history")
        for i in range(3):
            await store.add_historical_url(f"https://a.to/leaked/{i}", platform="file-sharing")

        urls = await store.list_historical_urls(10)
        assert sorted(urls) == [f"https://a.to/leaked/{i}" for i in range(3)]
        assert len(await store.list_historical_urls(2)) == 2


@pytest.mark.asyncio
async def test_unreadable_artifact_is_skipped() -> None:
    """Test broken files do not break listing."""
    with TemporaryDirectory() as tmpdir:
        store = YAMLKnownSiteStore(Path(tmpdir) / "known_sites", Path(tmpdir) / "history")
        (Path(tmpdir) / "known_sites" / "broken.yaml").write_text("base_url: [unclosed", encoding="utf-8")
        await store.create_known_site(_result())

        assert len(await store.list_known_sites()) == 1


@pytest.mark.asyncio
async def test_session_store_roundtrip() -> None:
    """Test sessions are created, updated and read back."""
    with TemporaryDirectory() as tmpdir:
        store = YAMLSessionStore(Path(tmpdir) / "sessions")

        session_id = await store.create_session("user-1", "brand-1")
        eta = datetime(2026, 1, 1, tzinfo=timezone.utc)
        await store.update_session(session_id, {
            "status": "RUNNING",
            "queries_processed": 2,
            "estimated_completion": eta,
        })
        record = await store.get_session(session_id)

        assert record["brand_profile_id"] == "brand-1"
        assert record["user_id"] == "user-1"
        assert record["queries_processed"] == 2
        assert record["estimated_completion"] == eta.isoformat()
        assert await store.get_session("missing") is None
