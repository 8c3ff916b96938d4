# tests/conftest.py
import asyncio
import pytest
from typing import List, Optional

from app.core.hub import IntelligenceHub
from app.models.internal import ContentSource, HealthStatus
from app.models.requests import SearchFilters
from app.services.adapters.base import SourceAdapter
from app.services.analytics_service import AnalyticsRecorder
from app.services.cache_service import CacheService
from app.services.fanout_executor import FanOutExecutor
from app.services.fusion_ranker import FusionRanker
from app.services.health_monitor import HealthMonitor
from app.services.source_registry import SourceRegistry

TEST_TIMEOUT = 0.2

class FakeAdapter(SourceAdapter):
    """In-memory adapter with scriptable latency, payload and failures"""

    def __init__(
        self,
        source_id: str,
        results: Optional[List] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        probe_ok: bool = True,
        probe_error: Optional[Exception] = None
    ):
        super().__init__(timeout=1)
        self.source_id = source_id
        self.results = results or []
        self.delay = delay
        self.error = error
        self.probe_ok = probe_ok
        self.probe_error = probe_error
        self.calls = 0
        self.probes = 0
        self.closed = False

    async def search(self, query: str, filters: SearchFilters) -> List:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.results)

    async def probe(self) -> bool:
        self.probes += 1
        if self.probe_error:
            raise self.probe_error
        return self.probe_ok

    async def close(self):
        self.closed = True

def make_source(source_id: str, **overrides) -> ContentSource:
    data = {
        "id": source_id,
        "name": source_id.replace("_", " ").title(),
        "type": "api",
        "health_status": HealthStatus.ACTIVE,
        "response_time": 200,
        "reliability": 90,
        "cost_per_request": 0.0,
        "daily_limit": 1000,
        "priority": 5,
        "capabilities": ["search"],
        "regions": ["global"],
    }
    data.update(overrides)
    return ContentSource.model_validate(data)

def make_item(item_id: str, **overrides) -> dict:
    data = {
        "id": item_id,
        "title": f"Title {item_id}",
        "release_date": "2010-07-16",
        "rating": 8.0,
        "vote_count": 500,
        "popularity": 40.0,
        "original_language": "en",
    }
    data.update(overrides)
    return data

@pytest.fixture
def registry():
    return SourceRegistry(reliability_floor=40, smoothing=0.5, usage_period_seconds=86400)

@pytest.fixture
def analytics():
    return AnalyticsRecorder()

@pytest.fixture
def memory_cache():
    """Cache without Redis so tests never touch the network"""
    return CacheService(redis_url="", max_memory_size=100)

@pytest.fixture
def build_hub(registry, analytics, memory_cache):
    """Factory wiring a hub around the shared registry with short timeouts"""
    def _build(timeout: float = TEST_TIMEOUT, current_year: int = 2026) -> IntelligenceHub:
        return IntelligenceHub(
            registry,
            cache=memory_cache,
            analytics=analytics,
            executor=FanOutExecutor(registry, analytics, timeout=timeout),
            ranker=FusionRanker(current_year=current_year),
            monitor=HealthMonitor(registry, interval=0.05, probe_timeout=TEST_TIMEOUT),
        )
    return _build
