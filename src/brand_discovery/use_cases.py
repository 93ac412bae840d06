"""Discovery session lifecycle."""

import asyncio
import logging
import time
from collections import deque
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

from brand_discovery.config import DiscoveryConfig
from brand_discovery.core import (
    BrandProfile,
    ConfigurationError,
    DiscoveryResult,
    DiscoverySession,
    DuplicateFilter,
    EventSink,
    EventType,
    HistoricalAnalyzer,
    KnownSiteConflictError,
    KnownSiteStore,
    QueryPlanner,
    RiskScorer,
    SearchGateway,
    SearchQuery,
    SearchResult,
    SessionStatus,
    SessionStateError,
    SessionStore,
)

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Cancelled by user"
ETA_WINDOW = 10


class DiscoverySessionController:
    """Own one discovery run for one brand profile.

    Queries run strictly one after another: plan, search across providers,
    drop known URLs, score the rest, and record every accepted URL in the
    corpus before the next query starts. Accepted results are written to the
    known-site store when the queries are exhausted.
    """

    def __init__(
        self,
        profile: Optional[BrandProfile],
        planner: QueryPlanner,
        gateway: SearchGateway,
        duplicate_filter: DuplicateFilter,
        known_site_store: KnownSiteStore,
        session_store: SessionStore,
        event_sink: Optional[EventSink] = None,
        historical_analyzer: Optional[HistoricalAnalyzer] = None,
        scorer: Optional[RiskScorer] = None,
        config: Optional[DiscoveryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.profile = profile
        self.planner = planner
        self.gateway = gateway
        self.duplicate_filter = duplicate_filter
        self.known_site_store = known_site_store
        self.session_store = session_store
        self.event_sink = event_sink
        self.config = config or DiscoveryConfig()
        self.historical_analyzer = historical_analyzer if self.config.enable_historical_analysis else None
        self.scorer = scorer
        self._sleep = sleep
        self._clock = clock

        self.session: Optional[DiscoverySession] = None
        self.queries: list[SearchQuery] = []
        self._task: Optional[asyncio.Task] = None
        self._resumed = asyncio.Event()
        self._resumed.set()
        self.results: list[DiscoveryResult] = []
        self._pending: list[DiscoveryResult] = []
        self._durations: deque[float] = deque(maxlen=ETA_WINDOW)

    async def start(self) -> str:
        """Create the session record and start processing in the background.

        Raises:
            ConfigurationError: no usable brand profile.
            SessionStateError: the session was already started.
        """
        if self._task is not None:
            raise SessionStateError("Discovery session already started")
        if self.profile is None or not self.profile.name.strip():
            raise ConfigurationError("Brand profile not found")

        if self.scorer is None:
            self.scorer = RiskScorer(self.profile, historical_analyzer=self.historical_analyzer)

        self.queries = await self.plan_queries()
        session_id = await self.session_store.create_session(self.profile.user_id, self.profile.id)
        self.session = DiscoverySession(
            session_id=session_id,
            user_id=self.profile.user_id,
            brand_profile_id=self.profile.id,
            total_queries=len(self.queries),
        )
        logger.info(
            "Discovery session %s started for %r with %d queries",
            session_id, self.profile.name, len(self.queries),
        )

        await self._emit(EventType.DISCOVERY_STARTED, {
            "totalQueries": len(self.queries),
            "brandProfile": self.profile.name,
        })
        self._task = asyncio.create_task(self._run(), name=f"discovery-{session_id}")
        return session_id

    async def plan_queries(self) -> list[SearchQuery]:
        patterns = None
        if self.historical_analyzer is not None:
            patterns = await self.historical_analyzer.analyze_patterns()
        return self.planner.plan(self.profile, patterns)

    async def wait(self) -> DiscoverySession:
        """Block until the session reaches COMPLETED or ERROR."""
        if self._task is None:
            raise SessionStateError("Discovery session not started")
        await asyncio.wait({self._task})
        return self.get_status()

    async def pause(self) -> None:
        """Stop before the next query; the query in flight finishes."""
        session = self._require_active()
        if session.status is SessionStatus.PAUSED:
            return
        session.status = SessionStatus.PAUSED
        self._resumed.clear()
        await self._save_progress()
        await self._emit(EventType.DISCOVERY_PAUSED, {"queriesProcessed": session.queries_processed})

    async def resume(self) -> None:
        session = self._require_active()
        if session.status is SessionStatus.RUNNING:
            return
        session.status = SessionStatus.RUNNING
        self._resumed.set()
        await self._save_progress()
        await self._emit(EventType.DISCOVERY_RESUMED, {"queriesProcessed": session.queries_processed})

    async def cancel(self) -> None:
        """Stop the session. Results not yet persisted are discarded."""
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        await asyncio.wait({self._task})

    def get_status(self) -> Optional[DiscoverySession]:
        """Snapshot of the session for progress pollers."""
        if self.session is None:
            return None
        return replace(self.session, errors=list(self.session.errors))

    async def _run(self) -> None:
        session = self.session
        try:
            await self._process_queries()
            await self._persist_results()
            session.status = SessionStatus.COMPLETED
            session.current_query = None
            await self._save_progress()
            logger.info(
                "Discovery session %s completed: %d new sites, %d duplicates filtered",
                session.session_id, session.new_sites_found, session.duplicates_filtered,
            )
            await self._emit(EventType.DISCOVERY_COMPLETED, {
                "newSitesFound": session.new_sites_found,
                "duplicatesFiltered": session.duplicates_filtered,
                "totalQueries": session.total_queries,
                "errors": len(session.errors),
            })
        except asyncio.CancelledError:
            self._discard_pending()
            session.status = SessionStatus.ERROR
            session.last_error = CANCELLED_MESSAGE
            logger.info("Discovery session %s cancelled", session.session_id)
            await self._save_progress()
            await self._emit(EventType.DISCOVERY_ERROR, {"error": CANCELLED_MESSAGE})
            raise
        except Exception as e:
            logger.exception("Discovery session %s failed", session.session_id)
            self._discard_pending()
            session.status = SessionStatus.ERROR
            session.last_error = str(e) or e.__class__.__name__
            try:
                await self._save_progress()
            except Exception:
                logger.exception("Could not record failure of session %s", session.session_id)
            await self._emit(EventType.DISCOVERY_ERROR, {"error": session.last_error})

    async def _process_queries(self) -> None:
        session = self.session
        for index, query in enumerate(self.queries):
            await self._resumed.wait()

            started = self._clock()
            session.current_query = query.text
            await self._emit(EventType.QUERY_PROCESSING, {"query": query.text, "index": index})

            try:
                search_results = await self.gateway.search_across_providers(
                    query, on_provider_error=self._on_provider_error
                )
                accepted = await self._filter_and_score(search_results)
                logger.info(
                    "[%d/%d] %r: %d results, %d new sites",
                    index + 1, len(self.queries), query.text, len(search_results), len(accepted),
                )
            except Exception as e:
                self._record_query_error(query, e)

            self._durations.append(self._clock() - started)
            await self._update_progress()

            if self.config.respect_rate_limits and index < len(self.queries) - 1:
                await self._sleep(self.config.inter_query_delay)

    async def _filter_and_score(self, search_results: list[SearchResult]) -> list[DiscoveryResult]:
        """Classify, score and accept new URLs of one query."""
        session = self.session
        by_url: dict[str, SearchResult] = {}
        for result in search_results:
            by_url.setdefault(result.url, result)

        classification = self.duplicate_filter.classify(list(by_url))
        session.duplicates_filtered += len(classification.duplicate) + len(classification.variation)

        accepted = []
        for url in classification.new:
            # An earlier URL of this batch may have claimed the domain
            if self.duplicate_filter.is_known(url):
                session.duplicates_filtered += 1
                continue

            result = await self.scorer.build_result(url, by_url[url])
            if result.confidence < self.config.min_confidence_threshold:
                logger.debug("Skipping %s: confidence %.2f", url, result.confidence)
                continue

            self.duplicate_filter.add_known_url(url)
            self._pending.append(result)
            accepted.append(result)
            session.new_sites_found += 1

        return accepted

    async def _persist_results(self) -> None:
        user_id = self.profile.user_id
        while self._pending:
            result = self._pending[0]
            write = asyncio.ensure_future(self.known_site_store.create_known_site(result, user_id))
            try:
                # A single write is never torn by cancellation
                await asyncio.shield(write)
            except asyncio.CancelledError:
                # The write still lands; account for it before rolling back the rest
                await asyncio.wait({write})
                self._settle_write(write, result)
                raise
            except KnownSiteConflictError:
                logger.debug("Known site already exists: %s", result.url)
            else:
                self.results.append(result)
                logger.info("Saved new site: %s", result.domain)
            self._pending.pop(0)

    def _settle_write(self, write: asyncio.Future, result: DiscoveryResult) -> None:
        """Record a write that finished after the session was cancelled."""
        if write.cancelled():
            return
        error = write.exception()
        if error is None:
            self.results.append(result)
            logger.info("Saved new site: %s", result.domain)
        elif isinstance(error, KnownSiteConflictError):
            logger.debug("Known site already exists: %s", result.url)
        else:
            logger.warning("Could not save %s: %s", result.url, error)
            return
        self._pending.pop(0)

    def _discard_pending(self) -> None:
        for result in self._pending:
            self.duplicate_filter.remove_known_url(result.url)
        if self._pending:
            logger.info("Discarded %d unsaved results", len(self._pending))
        self.session.new_sites_found -= len(self._pending)
        self._pending.clear()

    def _record_query_error(self, query: SearchQuery, error: Exception) -> None:
        message = f'Query "{query.text}": {error}'
        logger.warning(message)
        self.session.last_error = message
        self.session.errors.append(message)

    async def _on_provider_error(self, provider: str, error: Exception) -> None:
        await self._emit(EventType.PROVIDER_ERROR, {"provider": provider, "error": str(error)})

    async def _update_progress(self) -> None:
        session = self.session
        session.queries_processed += 1

        remaining = session.total_queries - session.queries_processed
        average = sum(self._durations) / len(self._durations) if self._durations else 0.0
        session.estimated_completion = datetime.now(timezone.utc) + timedelta(seconds=remaining * average)

        await self._save_progress()
        await self._emit(EventType.DISCOVERY_PROGRESS, {
            "queriesProcessed": session.queries_processed,
            "totalQueries": session.total_queries,
            "newSitesFound": session.new_sites_found,
            "currentQuery": session.current_query,
        })

    async def _save_progress(self) -> None:
        session = self.session
        await self.session_store.update_session(session.session_id, {
            "status": session.status.value,
            "queries_processed": session.queries_processed,
            "total_queries": session.total_queries,
            "new_sites_found": session.new_sites_found,
            "duplicates_filtered": session.duplicates_filtered,
            "current_query": session.current_query,
            "estimated_completion": session.estimated_completion,
            "last_error": session.last_error,
        })

    async def _emit(self, event_type: EventType, payload: dict[str, Any]) -> None:
        if self.event_sink is None or self.session is None:
            return
        try:
            await self.event_sink.emit(self.session.session_id, event_type, payload)
        except Exception:
            logger.warning("Could not emit %s event", event_type.value, exc_info=True)

    def _require_active(self) -> DiscoverySession:
        if self.session is None:
            raise SessionStateError("Discovery session not started")
        if self.session.is_terminal:
            raise SessionStateError(f"Discovery session already {self.session.status.value}")
        return self.session
