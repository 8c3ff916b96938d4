# app/services/health_monitor.py
import asyncio
import logging
import time
from typing import Dict, Optional

from app.config.settings import settings
from app.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

class HealthMonitor:
    """Background probe loop that keeps registry health and reliability current"""

    def __init__(
        self,
        registry: SourceRegistry,
        interval: Optional[float] = None,
        probe_timeout: Optional[float] = None
    ):
        self.registry = registry
        self.interval = interval or settings.HEALTH_CHECK_INTERVAL
        self.probe_timeout = probe_timeout or settings.PROBE_TIMEOUT
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="source-health-monitor")
        logger.info(f"Health monitor started (interval {self.interval}s)")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Health monitor stopped")

    async def _run(self):
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Health check pass failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval)

    async def run_once(self) -> Dict[str, bool]:
        """Probe every registered source once; returns source id -> healthy"""
        await self.registry.reset_usage_if_due()

        source_ids = [source.id for source in self.registry.snapshot()]
        results = await asyncio.gather(
            *(self._probe_source(source_id) for source_id in source_ids),
            return_exceptions=True
        )

        outcome = {}
        for source_id, result in zip(source_ids, results):
            if isinstance(result, Exception):
                logger.error(f"Probe bookkeeping failed for {source_id}: {result}")
                outcome[source_id] = False
            else:
                outcome[source_id] = result

        self.ticks += 1
        healthy = sum(1 for ok in outcome.values() if ok)
        logger.debug(f"Health pass {self.ticks}: {healthy}/{len(outcome)} sources healthy")
        return outcome

    async def _probe_source(self, source_id: str) -> bool:
        adapter = self.registry.adapter(source_id)
        if adapter is None:
            logger.warning(f"No adapter registered for {source_id}, marking probe as failed")
            await self.registry.record_failure(source_id)
            return False

        start_time = time.perf_counter()
        try:
            healthy = await asyncio.wait_for(adapter.probe(), timeout=self.probe_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Health probe for {source_id} timed out after {self.probe_timeout}s")
            healthy = False
        except Exception as e:
            logger.warning(f"Health probe for {source_id} failed: {e}")
            healthy = False

        if healthy:
            latency_ms = (time.perf_counter() - start_time) * 1000
            await self.registry.record_success(source_id, latency_ms)
        else:
            await self.registry.record_failure(source_id)
        return bool(healthy)
