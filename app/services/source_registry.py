# app/services/source_registry.py
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.config.settings import settings
from app.models.internal import ContentSource, HealthStatus
from app.services.adapters.base import SourceAdapter

logger = logging.getLogger(__name__)

FAILURE_PENALTY = 5
REPEATED_FAILURE_PENALTY = 10

class SourceRegistry:
    """
    Single source of truth for source configuration and live state.

    Records are owned by the registry; callers only ever receive copies.
    Each mutation of a source runs under that source's own lock so request
    handling and the probe loop never lose each other's updates.
    """

    def __init__(
        self,
        reliability_floor: Optional[int] = None,
        smoothing: Optional[float] = None,
        usage_period_seconds: Optional[int] = None
    ):
        self.reliability_floor = settings.RELIABILITY_FLOOR if reliability_floor is None else reliability_floor
        self.smoothing = settings.RESPONSE_TIME_SMOOTHING if smoothing is None else smoothing
        self.usage_period_seconds = usage_period_seconds or settings.DAILY_USAGE_RESET_SECONDS

        self._sources: Dict[str, ContentSource] = {}
        self._adapters: Dict[str, SourceAdapter] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._period_started = time.time()

    def register(self, source: ContentSource, adapter: Optional[SourceAdapter] = None):
        if source.id in self._sources:
            raise ValueError(f"Source already registered: {source.id}")

        self._sources[source.id] = source.model_copy(deep=True)
        self._locks[source.id] = asyncio.Lock()
        if adapter is not None:
            self._adapters[source.id] = adapter
        logger.info(f"Registered source {source.id} ({source.type.value}, priority {source.priority})")

    def get(self, source_id: str) -> Optional[ContentSource]:
        source = self._sources.get(source_id)
        return source.model_copy(deep=True) if source else None

    def adapter(self, source_id: str) -> Optional[SourceAdapter]:
        return self._adapters.get(source_id)

    @property
    def adapters(self) -> Dict[str, SourceAdapter]:
        return dict(self._adapters)

    def snapshot(self) -> List[ContentSource]:
        return [source.model_copy(deep=True) for source in self._sources.values()]

    def list_active(self, region: Optional[str] = None) -> List[ContentSource]:
        """Sources that may be planned: not inactive, with quota left, serving the region"""
        return [
            source.model_copy(deep=True)
            for source in self._sources.values()
            if source.health_status != HealthStatus.INACTIVE
            and source.has_quota
            and source.serves_region(region)
        ]

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._sources

    async def record_success(self, source_id: str, latency_ms: float):
        async with self._locks[source_id]:
            source = self._sources[source_id]
            source.reliability = min(100, source.reliability + 1)
            source.health_status = HealthStatus.ACTIVE
            source.consecutive_failures = 0
            source.response_time = round(
                (1 - self.smoothing) * source.response_time + self.smoothing * max(0.0, latency_ms), 2
            )
            source.last_health_check = datetime.now(timezone.utc)

    async def record_failure(self, source_id: str):
        async with self._locks[source_id]:
            source = self._sources[source_id]
            source.consecutive_failures += 1
            penalty = REPEATED_FAILURE_PENALTY if source.consecutive_failures > 1 else FAILURE_PENALTY
            source.reliability = max(0, source.reliability - penalty)

            previous = source.health_status
            if source.reliability < self.reliability_floor:
                source.health_status = HealthStatus.INACTIVE
            else:
                source.health_status = HealthStatus.DEGRADED
            source.last_health_check = datetime.now(timezone.utc)

        if previous != source.health_status:
            logger.warning(
                f"Source {source_id} is now {source.health_status.value} "
                f"(reliability {source.reliability}, {source.consecutive_failures} consecutive failures)"
            )

    async def increment_usage(self, source_id: str, count: int = 1):
        async with self._locks[source_id]:
            source = self._sources[source_id]
            source.daily_usage += count
            if not source.has_quota:
                logger.warning(f"Source {source_id} reached its daily limit of {source.daily_limit}")

    async def reset_usage_if_due(self, now: Optional[float] = None) -> bool:
        """Start a new usage period once the configured period has elapsed"""
        now = time.time() if now is None else now
        if now - self._period_started < self.usage_period_seconds:
            return False

        for source_id in list(self._sources):
            async with self._locks[source_id]:
                self._sources[source_id].daily_usage = 0
        self._period_started = now
        logger.info("Daily usage counters reset for all sources")
        return True
