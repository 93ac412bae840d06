"""CLI entry point for brand discovery."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml

from brand_discovery.adapters.cache import MemoryCache
from brand_discovery.adapters.events import CompositeEventSink, LoggingEventSink, SlackEventSink
from brand_discovery.adapters.search import SearchClient
from brand_discovery.adapters.storage import YAMLKnownSiteStore, YAMLSessionStore
from brand_discovery.config import Settings, get_settings
from brand_discovery.core import (
    BrandProfile,
    ConfigurationError,
    DuplicateFilter,
    HistoricalAnalyzer,
    ProviderRateLimiter,
    QueryPlanner,
    RiskScorer,
    SearchGateway,
    SessionStatus,
)
from brand_discovery.use_cases import DiscoverySessionController


def load_profile(path: Path) -> BrandProfile:
    """Read a brand profile YAML (`id`, `name`, `variations`, `keywords`, `user_id`)."""
    if not path.exists():
        raise ConfigurationError(f"Brand profile not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    name = str(data.get("name") or "").strip()
    if not name:
        raise ConfigurationError(f"Brand profile {path} has no name")

    return BrandProfile(
        id=str(data.get("id") or path.stem),
        name=name,
        variations=[str(v) for v in data.get("variations") or []],
        keywords=[str(k) for k in data.get("keywords") or []],
        user_id=data.get("user_id"),
    )


def main(
    profile: Path = typer.Argument(..., help="Brand profile YAML"),
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Settings YAML"),
    max_queries: Optional[int] = typer.Option(None, "--max-queries", help="Cap queries for this run"),
    no_delay: bool = typer.Option(False, "--no-delay", help="Skip the pause between queries"),
    no_slack: bool = typer.Option(False, "--no-slack", help="Disable Slack notifications"),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging"),
) -> None:
    """Search for new sites exposing a brand and store the ones not seen before."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(async_run(profile, config, max_queries, no_delay, no_slack))
    except ConfigurationError as e:
        print(f"\n✗ {e}")
        raise typer.Exit(code=1)


def app() -> None:
    """CLI entry point."""
    typer.run(main)


async def async_run(
    profile_path: Path,
    config_path: Path,
    max_queries: Optional[int],
    no_delay: bool,
    no_slack: bool,
) -> None:
    """Async implementation of a discovery run."""
    settings = get_settings(config_path)
    profile = load_profile(profile_path)

    if max_queries is not None:
        settings.discovery.max_queries_per_session = max_queries
    if no_delay:
        settings.discovery.inter_query_delay = 0.0

    print("\n" + "=" * 70)
    print(f"🔎  BRAND DISCOVERY - {profile.name}")
    print("=" * 70)
    _print_credentials(settings, no_slack)

    print("\n⚙️  Settings:")
    print(f"  • Max queries: {settings.discovery.max_queries_per_session}")
    print(f"  • Min confidence: {settings.discovery.min_confidence_threshold:.0%}")
    print(f"  • Similarity threshold: {settings.filter.similarity_threshold:.0%}")
    print(f"  • Historical analysis: {'on' if settings.discovery.enable_historical_analysis else 'off'}")
    print(f"  • Data: {settings.paths.data_dir}")

    search_client = SearchClient.from_settings(settings)
    if not search_client.available_providers():
        raise ConfigurationError("No search provider configured")

    known_site_store = YAMLKnownSiteStore(settings.known_sites_dir, settings.history_dir)
    session_store = YAMLSessionStore(settings.sessions_dir)

    duplicate_filter = DuplicateFilter(
        store=known_site_store,
        similarity_threshold=settings.filter.similarity_threshold,
        similarity_sample_size=settings.filter.similarity_sample_size,
        max_variants=settings.filter.max_variants,
        historical_url_limit=settings.filter.historical_url_limit,
    )
    await duplicate_filter.initialize()
    stats = duplicate_filter.get_stats()
    print(f"\n📚 Known corpus: {stats['known_sites']} sites, {stats['known_urls']} URLs, "
          f"{stats['domain_variations']} domain variations")

    historical_analyzer = None
    if settings.discovery.enable_historical_analysis:
        historical_analyzer = HistoricalAnalyzer(
            store=known_site_store,
            duplicate_filter=duplicate_filter,
            historical_url_limit=settings.filter.historical_url_limit,
        )

    gateway = SearchGateway(
        backend=search_client,
        rate_limiter=ProviderRateLimiter(
            requests_per_minute=settings.providers.requests_per_minute,
            min_interval=settings.providers.min_request_interval,
        ),
        providers=settings.discovery.search_providers,
        cache=MemoryCache(),
        exclude_sites=settings.providers.exclude_sites,
    )

    sinks = [LoggingEventSink()]
    if settings.slack_webhook_url and not no_slack:
        sinks.append(SlackEventSink(settings.slack_webhook_url, brand_name=profile.name))

    controller = DiscoverySessionController(
        profile=profile,
        planner=QueryPlanner(
            max_queries_per_session=settings.discovery.max_queries_per_session,
            max_pattern_queries=settings.discovery.max_pattern_queries,
        ),
        gateway=gateway,
        duplicate_filter=duplicate_filter,
        known_site_store=known_site_store,
        session_store=session_store,
        event_sink=CompositeEventSink(sinks),
        historical_analyzer=historical_analyzer,
        scorer=RiskScorer(profile, settings.scoring, historical_analyzer),
        config=settings.discovery,
    )

    print(f"\n📡 Providers: {', '.join(gateway.rotation_order())}")
    session_id = await controller.start()
    print(f"🚀 Session {session_id}: {len(controller.queries)} queries planned")

    session = await controller.wait()

    print("\n" + "=" * 70)
    if session.status is SessionStatus.COMPLETED:
        print("✅ DONE")
    else:
        print(f"❌ FAILED: {session.last_error}")
    print("=" * 70)
    print(f"  • Queries processed: {session.queries_processed}/{session.total_queries}")
    print(f"  • New sites: {session.new_sites_found}")
    print(f"  • Duplicates filtered: {session.duplicates_filtered}")
    if session.errors:
        print(f"  • Queries with errors: {len(session.errors)}")
        for error in session.errors[:5]:
            print(f"    - {error}")

    if controller.results:
        print("\n🆕 New sites:")
        for result in sorted(controller.results, key=lambda r: r.risk_score, reverse=True):
            print(f"  [{result.risk_score:5.1f}] {result.platform.value:<12} {result.url}")
    print()


def _print_credentials(settings: Settings, no_slack: bool) -> None:
    print("\n🔑 Credentials:")
    checks = [
        ("SERPER_API_KEY", bool(settings.serper_api_key)),
        ("GOOGLE_SEARCH_API_KEY + GOOGLE_SEARCH_ENGINE_ID",
         bool(settings.google_api_key and settings.google_engine_id)),
        ("BING_SEARCH_API_KEY", bool(settings.bing_api_key)),
    ]
    for name, present in checks:
        print(f"  {'✓' if present else '✗'} {name}")

    if no_slack:
        print("  ⚠️  SLACK_WEBHOOK_URL - disabled by --no-slack")
    elif settings.slack_webhook_url:
        print("  ✓ SLACK_WEBHOOK_URL")
    else:
        print("  ⚠️  SLACK_WEBHOOK_URL - not set (notifications disabled)")


if __name__ == "__main__":
    app()
