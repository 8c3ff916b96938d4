# app/api/endpoints/health.py
from fastapi import APIRouter, Depends
import time
import logging

from app.core.hub import IntelligenceHub
from app.models.responses import HealthResponse, SystemHealth
from app.api.dependencies import get_hub

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/", response_model=HealthResponse)
async def health_check(hub: IntelligenceHub = Depends(get_hub)):
    """Service health including the cache and the source pool"""
    start_time = time.time()

    system = hub.get_system_health()
    cache_status = await hub.cache.health_check()
    services = {
        "api": "healthy",
        "cache": cache_status,
        "sources": system.status,
        "health_monitor": "healthy" if hub.monitor.is_running else "stopped"
    }

    if system.status == "critical" or cache_status != "healthy":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        services=services,
        response_time_ms=round((time.time() - start_time) * 1000, 2)
    )

@router.get("/system", response_model=SystemHealth)
async def system_health(hub: IntelligenceHub = Depends(get_hub)):
    """Share of sources currently active"""
    return hub.get_system_health()
