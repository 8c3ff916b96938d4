import asyncio
import time
import logging
from typing import Dict, List, Optional
from uuid import uuid4

from app.config.settings import settings
from app.config.sources import load_source_catalog
from app.core.exceptions import HubException, PlanningError
from app.models.internal import FanOutOutcome, HealthStatus
from app.models.requests import SearchRequest
from app.models.responses import (
    AnalyticsDashboard,
    EnhancedResult,
    SearchAnalytics,
    SearchMetadata,
    SearchResult,
    SystemHealth,
)
from app.services.adapters import ADAPTERS
from app.services.analytics_service import AnalyticsRecorder
from app.services.cache_service import CacheService
from app.services.fanout_executor import FanOutExecutor
from app.services.fusion_ranker import FusionRanker
from app.services.health_monitor import HealthMonitor
from app.services.query_planner import QueryPlanner
from app.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

SEARCH_CACHE_NAMESPACE = "search"

class IntelligenceHub:
    """Caller-facing facade: plan, fan out, fuse, and report"""

    def __init__(
        self,
        registry: SourceRegistry,
        cache: Optional[CacheService] = None,
        analytics: Optional[AnalyticsRecorder] = None,
        planner: Optional[QueryPlanner] = None,
        executor: Optional[FanOutExecutor] = None,
        ranker: Optional[FusionRanker] = None,
        monitor: Optional[HealthMonitor] = None,
        cache_ttl: Optional[int] = None
    ):
        self.registry = registry
        self.cache = cache or CacheService()
        self.analytics = analytics or AnalyticsRecorder()
        self.planner = planner or QueryPlanner(registry)
        self.executor = executor or FanOutExecutor(registry, self.analytics)
        self.ranker = ranker or FusionRanker()
        self.monitor = monitor or HealthMonitor(registry)
        self.cache_ttl = cache_ttl or settings.CACHE_TTL_SEARCH_RESULTS

    async def start(self):
        self.monitor.start()

    async def shutdown(self):
        logger.info("Shutting down intelligence hub...")
        await self.monitor.stop()
        await asyncio.gather(
            *(adapter.close() for adapter in self.registry.adapters.values()),
            self.cache.close(),
            return_exceptions=True
        )
        logger.info("Intelligence hub shutdown completed")

    async def intelligent_search(self, request: SearchRequest) -> SearchResult:
        request_id = str(uuid4())
        start_time = time.perf_counter()
        self.analytics.record_request()

        logger.info(f"Starting search for query: {request.query[:50]}...",
                    extra={"request_id": request_id})

        try:
            strategy = self.planner.determine_strategy(request)
            cache_key = self.cache.build_search_key(request.query, strategy, self._cache_scope(request))

            cached = await self.cache.get(cache_key, SEARCH_CACHE_NAMESPACE)
            self.analytics.update_cache_hit_rate(self.cache.hit_rate)
            if cached:
                logger.info("Cache hit for query", extra={"request_id": request_id})
                return self._from_cache(request, strategy, cached, start_time)

            try:
                plan = self.planner.plan(request, strategy)
            except PlanningError as e:
                logger.warning(f"No sources available: {e}", extra={"request_id": request_id})
                return self._build_result(request, strategy, [], FanOutOutcome(), start_time)

            outcome = await self.executor.execute(plan, request)
            reliability = {s.id: s.reliability for s in self.registry.snapshot()}
            ranked = self.ranker.fuse(outcome.results, request, reliability)
            results = self.ranker.select(ranked, request)

            response = self._build_result(request, strategy, results, outcome, start_time)

            if ranked:
                # Filters and max_results are re-applied on every cache hit
                await self.cache.set(
                    cache_key,
                    {
                        "sources_used": response.metadata.sources_used,
                        "failed_sources": response.metadata.failed_sources,
                        "ranked": [r.model_dump(mode="json") for r in ranked],
                    },
                    ttl=self.cache_ttl,
                    namespace=SEARCH_CACHE_NAMESPACE
                )

            logger.info(
                f"Search completed in {response.metadata.search_time:.0f}ms: "
                f"{response.metadata.total_results} results from {response.metadata.sources_used}",
                extra={"request_id": request_id}
            )
            return response

        except Exception as e:
            logger.error(f"Search error: {e}", extra={"request_id": request_id}, exc_info=True)
            raise HubException(f"Search processing failed: {e}") from e

    def _build_result(
        self,
        request: SearchRequest,
        strategy: str,
        results: List[EnhancedResult],
        outcome: FanOutOutcome,
        start_time: float
    ) -> SearchResult:
        search_time = (time.perf_counter() - start_time) * 1000
        sources_used = list(outcome.succeeded)
        cost = self._cost_incurred(sources_used)

        self.analytics.record_source_usage(sources_used)
        self.analytics.record_cost(cost)
        self.analytics.record_response_time(search_time)

        return SearchResult(
            query=request.query,
            results=results,
            metadata=SearchMetadata(
                total_results=len(results),
                sources_used=sources_used,
                failed_sources=list(outcome.failed),
                search_time=round(search_time, 2),
                confidence=self._overall_confidence(results),
                strategy=strategy,
                cost_incurred=cost,
            ),
            analytics=self._analytics_snapshot()
        )

    @staticmethod
    def _cache_scope(request: SearchRequest) -> str:
        """Request fields that change the plan or the sources' answers"""
        filters = request.filters
        return "|".join([
            request.region or "",
            (filters.region or "").lower(),
            filters.content_type.value if filters.content_type else "",
            (filters.language or "").lower(),
        ])

    def _from_cache(self, request: SearchRequest, strategy: str, cached: Dict, start_time: float) -> SearchResult:
        ranked = [EnhancedResult.model_validate(entry) for entry in cached["ranked"]]
        results = self.ranker.select(ranked, request)
        search_time = (time.perf_counter() - start_time) * 1000
        self.analytics.record_response_time(search_time)

        return SearchResult(
            query=request.query,
            results=results,
            metadata=SearchMetadata(
                total_results=len(results),
                sources_used=cached["sources_used"],
                failed_sources=cached["failed_sources"],
                search_time=round(search_time, 2),
                confidence=self._overall_confidence(results),
                strategy=strategy,
                cost_incurred=0.0,
                cached=True,
            ),
            analytics=self._analytics_snapshot()
        )

    def _analytics_snapshot(self) -> SearchAnalytics:
        return SearchAnalytics(
            source_performance=self.analytics.performance_scores(self.registry.snapshot()),
            cache_hit_rate=round(self.analytics.cache_hit_rate, 4),
            failover_events=self.analytics.failover_events
        )

    def _overall_confidence(self, results: List[EnhancedResult]) -> float:
        if not results:
            return 0.0
        average = sum(r.confidence for r in results) / len(results)
        source_variety = len({s for r in results for s in r.sources})
        return round(min(100.0, average + source_variety * 5), 2)

    def _cost_incurred(self, sources_used: List[str]) -> float:
        total = 0.0
        for source_id in sources_used:
            source = self.registry.get(source_id)
            if source:
                total += source.cost_per_request
        return round(total, 6)

    def get_analytics_dashboard(self) -> AnalyticsDashboard:
        sources = self.registry.snapshot()
        return AnalyticsDashboard(
            overview=self.analytics.overview(),
            sources=self.analytics.source_details(sources),
            performance=self.analytics.performance_scores(sources)
        )

    def get_system_health(self) -> SystemHealth:
        sources = self.registry.snapshot()
        total = len(sources)
        active = sum(1 for s in sources if s.health_status == HealthStatus.ACTIVE)
        percentage = (active / total * 100) if total else 0.0

        if percentage > 80:
            status = "healthy"
        elif percentage > 50:
            status = "degraded"
        else:
            status = "critical"

        return SystemHealth(
            status=status,
            health_percentage=round(percentage, 2),
            active_sources=active,
            total_sources=total
        )

def create_default_hub(cache: Optional[CacheService] = None) -> IntelligenceHub:
    """Register every catalog source that has a configured adapter"""
    registry = SourceRegistry()

    for source in load_source_catalog():
        adapter_cls = ADAPTERS.get(source.id)
        if adapter_cls is None:
            logger.warning(f"No adapter available for {source.id}, skipping")
            continue

        adapter = adapter_cls()
        if not adapter.is_configured():
            logger.warning(f"Adapter for {source.id} is not configured, skipping")
            continue

        registry.register(source, adapter)

    if not len(registry):
        logger.warning("No sources registered; every search will return an empty result")

    return IntelligenceHub(registry, cache=cache)
