# app/services/fanout_executor.py
import asyncio
import logging
import time
from typing import List, Optional, Tuple

from app.config.settings import settings
from app.core.exceptions import SourceError, SourceTimeoutError, SourceTransportError
from app.models.internal import ContentSource, ExecutionPlan, FanOutOutcome
from app.models.requests import SearchRequest
from app.services.analytics_service import AnalyticsRecorder
from app.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

def _discard_late_outcome(task: asyncio.Task):
    """Retrieve an abandoned call's outcome so it is never reported as unhandled"""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Abandoned source call failed late: {error}")

class FanOutExecutor:
    """
    Queries every planned source concurrently.

    Each source call is its own task bounded by ``timeout``; total latency is
    bounded by the slowest included source, not the sum. A failing source
    contributes no results and one failover event, nothing else.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        analytics: AnalyticsRecorder,
        timeout: Optional[float] = None
    ):
        self.registry = registry
        self.analytics = analytics
        self.timeout = timeout or settings.FANOUT_TIMEOUT

    async def execute(self, plan: ExecutionPlan, request: SearchRequest) -> FanOutOutcome:
        start_time = time.perf_counter()

        outcomes = await asyncio.gather(
            *(self._query_source(source, request) for source in plan.sources)
        )

        fan_out = FanOutOutcome()
        for source, (results, ok) in zip(plan.sources, outcomes):
            fan_out.results[source.id] = results
            if ok:
                fan_out.succeeded.append(source.id)
            else:
                fan_out.failed.append(source.id)

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Fan-out completed in {elapsed:.0f}ms: {len(fan_out.succeeded)} ok, "
            f"{len(fan_out.failed)} failed {fan_out.failed or ''}"
        )
        return fan_out

    async def _query_source(self, source: ContentSource, request: SearchRequest) -> Tuple[List, bool]:
        start_time = time.perf_counter()
        try:
            results = await self._call_source(source.id, request)
        except SourceError as e:
            logger.warning(f"Search failed for {source.id}: {e}")
            self.analytics.record_failover(source.id)
            await self.registry.record_failure(source.id)
            return [], False

        latency_ms = (time.perf_counter() - start_time) * 1000
        await self.registry.record_success(source.id, latency_ms)
        await self.registry.increment_usage(source.id)
        return results, True

    async def _call_source(self, source_id: str, request: SearchRequest) -> List:
        adapter = self.registry.adapter(source_id)
        if adapter is None:
            raise SourceTransportError(source_id, "no adapter registered")

        task = asyncio.ensure_future(adapter.search(request.query, request.filters))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            # Not awaited; the late outcome is discarded
            task.cancel()
            task.add_done_callback(_discard_late_outcome)
            raise SourceTimeoutError(source_id, f"timed out after {self.timeout}s")

        try:
            results = task.result()
        except SourceError:
            raise
        except Exception as e:
            raise SourceTransportError(source_id, str(e) or type(e).__name__) from e

        if results is None:
            return []
        if not isinstance(results, list):
            raise SourceTransportError(source_id, f"unexpected payload type {type(results).__name__}")
        return results
