# tests/services/test_source_registry.py
import asyncio
import time
import pytest

from app.models.internal import HealthStatus
from conftest import make_source, FakeAdapter

class TestRegistration:
    """Test registering and reading sources"""

    def test_register_and_get_returns_copy(self, registry):
        """Mutating a returned record never touches registry state"""
        registry.register(make_source("tmdb"), FakeAdapter("tmdb"))

        snapshot = registry.get("tmdb")
        snapshot.reliability = 0
        snapshot.daily_usage = 999

        assert registry.get("tmdb").reliability == 90
        assert registry.get("tmdb").daily_usage == 0
        assert registry.adapter("tmdb") is not None
        assert "tmdb" in registry
        assert len(registry) == 1

    def test_duplicate_registration_rejected(self, registry):
        registry.register(make_source("tmdb"))
        with pytest.raises(ValueError):
            registry.register(make_source("tmdb"))

    def test_get_unknown_source(self, registry):
        assert registry.get("missing") is None

    def test_list_active_filters_inactive_and_exhausted(self, registry):
        """Inactive sources and sources over their daily limit are not listed"""
        registry.register(make_source("tmdb"))
        registry.register(make_source("imdb_scraper", health_status=HealthStatus.INACTIVE))
        registry.register(make_source("letterboxd_api", daily_limit=10, daily_usage=10))
        registry.register(make_source("rotten_tomatoes", health_status=HealthStatus.DEGRADED))

        active = {s.id for s in registry.list_active()}

        assert active == {"tmdb", "rotten_tomatoes"}

    def test_list_active_region_filter(self, registry):
        registry.register(make_source("tmdb", regions=["global"]))
        registry.register(make_source("justwatch_api", regions=["us", "uk"]))
        registry.register(make_source("fandango_api", regions=["us"]))

        assert {s.id for s in registry.list_active("uk")} == {"tmdb", "justwatch_api"}
        assert {s.id for s in registry.list_active("US")} == {"tmdb", "justwatch_api", "fandango_api"}
        assert len(registry.list_active()) == 3

class TestReliability:
    """Test reliability and health bookkeeping"""

    async def test_success_raises_reliability_and_activates(self, registry):
        registry.register(make_source("tmdb", reliability=50, health_status=HealthStatus.DEGRADED))

        await registry.record_success("tmdb", latency_ms=100)

        source = registry.get("tmdb")
        assert source.reliability == 51
        assert source.health_status == HealthStatus.ACTIVE
        assert source.last_health_check is not None
        # smoothing 0.5 between 200 and 100
        assert source.response_time == 150

    async def test_first_failure_degrades(self, registry):
        registry.register(make_source("tmdb", reliability=90))

        await registry.record_failure("tmdb")

        source = registry.get("tmdb")
        assert source.reliability == 85
        assert source.health_status == HealthStatus.DEGRADED
        assert source.consecutive_failures == 1

    async def test_repeated_failures_use_heavier_penalty(self, registry):
        registry.register(make_source("tmdb", reliability=90))

        await registry.record_failure("tmdb")
        await registry.record_failure("tmdb")

        assert registry.get("tmdb").reliability == 75

    async def test_success_resets_failure_streak(self, registry):
        registry.register(make_source("tmdb", reliability=90))

        await registry.record_failure("tmdb")
        await registry.record_success("tmdb", 100)
        await registry.record_failure("tmdb")

        assert registry.get("tmdb").reliability == 81

    async def test_falls_inactive_below_floor(self, registry):
        registry.register(make_source("tmdb", reliability=45))

        await registry.record_failure("tmdb")

        source = registry.get("tmdb")
        assert source.reliability == 40
        assert source.health_status == HealthStatus.DEGRADED

        await registry.record_failure("tmdb")

        source = registry.get("tmdb")
        assert source.reliability == 30
        assert source.health_status == HealthStatus.INACTIVE
        assert registry.list_active() == []

    async def test_reliability_clamps_at_zero(self, registry):
        registry.register(make_source("tmdb", reliability=100))

        for _ in range(1000):
            await registry.record_failure("tmdb")

        assert registry.get("tmdb").reliability == 0

    async def test_reliability_clamps_at_hundred(self, registry):
        registry.register(make_source("tmdb", reliability=0))

        for _ in range(1000):
            await registry.record_success("tmdb", 100)

        assert registry.get("tmdb").reliability == 100

    async def test_concurrent_updates_are_not_lost(self, registry):
        registry.register(make_source("tmdb", reliability=0, daily_limit=100000))

        await asyncio.gather(
            *(registry.increment_usage("tmdb") for _ in range(500)),
            *(registry.record_success("tmdb", 50) for _ in range(60))
        )

        source = registry.get("tmdb")
        assert source.daily_usage == 500
        assert source.reliability == 60

class TestUsagePeriod:
    """Test daily usage accounting"""

    async def test_increment_usage(self, registry):
        registry.register(make_source("tmdb", daily_limit=2))

        await registry.increment_usage("tmdb")
        await registry.increment_usage("tmdb")

        assert registry.get("tmdb").daily_usage == 2
        assert registry.list_active() == []

    async def test_reset_only_when_period_elapsed(self, registry):
        registry.register(make_source("tmdb", daily_limit=1))
        await registry.increment_usage("tmdb")

        assert await registry.reset_usage_if_due(now=time.time() + 10) is False
        assert registry.get("tmdb").daily_usage == 1

        assert await registry.reset_usage_if_due(now=time.time() + 86401) is True
        assert registry.get("tmdb").daily_usage == 0
        assert [s.id for s in registry.list_active()] == ["tmdb"]
