# app/services/analytics_service.py - Operational telemetry for the hub
import logging
from typing import Dict, List, Iterable
from collections import Counter
from dataclasses import dataclass, field

from app.models.internal import ContentSource, HealthStatus
from app.models.responses import AnalyticsOverview, SourceDetail

logger = logging.getLogger(__name__)

@dataclass
class AnalyticsCounters:
    """Aggregate counters; mutated only from the event loop"""
    total_requests: int = 0
    completed_requests: int = 0
    total_response_time: float = 0.0
    failover_events: int = 0
    cache_hit_rate: float = 0.0
    total_cost: float = 0.0
    source_usage: Counter = field(default_factory=Counter)
    source_failures: Counter = field(default_factory=Counter)

def performance_score(source: ContentSource) -> float:
    """Mean of reliability, health (100 when active) and speed"""
    health_score = 100.0 if source.health_status == HealthStatus.ACTIVE else 0.0
    speed_score = max(0.0, 100.0 - source.response_time / 10)
    return round((source.reliability + health_score + speed_score) / 3, 2)

class AnalyticsRecorder:
    """Read-only operational snapshots built from counters fed by every hub stage"""

    def __init__(self):
        self.counters = AnalyticsCounters()
        logger.info("📊 Analytics recorder initialized")

    def record_request(self):
        self.counters.total_requests += 1

    def record_response_time(self, search_time_ms: float):
        self.counters.completed_requests += 1
        self.counters.total_response_time += search_time_ms

    def record_source_usage(self, source_ids: Iterable[str]):
        self.counters.source_usage.update(source_ids)

    def record_failover(self, source_id: str):
        self.counters.failover_events += 1
        self.counters.source_failures[source_id] += 1
        logger.debug(f"📊 Failover event for {source_id} (total {self.counters.failover_events})")

    def record_cost(self, cost: float):
        self.counters.total_cost += cost

    def update_cache_hit_rate(self, hit_rate: float):
        self.counters.cache_hit_rate = hit_rate

    @property
    def failover_events(self) -> int:
        return self.counters.failover_events

    @property
    def cache_hit_rate(self) -> float:
        return self.counters.cache_hit_rate

    @property
    def average_response_time(self) -> float:
        if not self.counters.completed_requests:
            return 0.0
        return self.counters.total_response_time / self.counters.completed_requests

    def overview(self) -> AnalyticsOverview:
        return AnalyticsOverview(
            total_requests=self.counters.total_requests,
            average_response_time=round(self.average_response_time, 2),
            cache_hit_rate=round(self.counters.cache_hit_rate, 4),
            failover_events=self.counters.failover_events,
            total_cost=round(self.counters.total_cost, 6),
            source_usage=dict(self.counters.source_usage)
        )

    def source_details(self, sources: List[ContentSource]) -> List[SourceDetail]:
        details = []
        for source in sources:
            usage_percentage = (
                source.daily_usage / source.daily_limit * 100 if source.daily_limit else 100.0
            )
            details.append(SourceDetail(
                id=source.id,
                name=source.name,
                health_status=source.health_status.value,
                reliability=source.reliability,
                response_time=source.response_time,
                daily_usage=source.daily_usage,
                daily_limit=source.daily_limit,
                usage_percentage=round(usage_percentage, 2),
                last_health_check=source.last_health_check
            ))
        return details

    def performance_scores(self, sources: List[ContentSource]) -> Dict[str, float]:
        return {source.id: performance_score(source) for source in sources}
