# app/api/endpoints/search.py
from fastapi import APIRouter, Depends, HTTPException
import logging

from app.core.hub import IntelligenceHub
from app.models.requests import SearchRequest
from app.models.responses import SearchResult, ErrorResponse, AnalyticsDashboard
from app.api.dependencies import get_hub, check_content_length, validate_request_id
from app.core.exceptions import HubException

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post(
    "/search",
    response_model=SearchResult,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse}
    },
    summary="Federated content search",
    description="Query the healthy sources concurrently and return one fused, ranked result set."
)
async def intelligent_search(
    request: SearchRequest,
    hub: IntelligenceHub = Depends(get_hub),
    request_id: str = Depends(validate_request_id),
    _: None = Depends(check_content_length)
):
    """
    Run a multi-source search.

    - **query**: Title or topic (1-500 characters)
    - **filters**: Optional genres, year/rating ranges, region, language, content type
    - **user_context**: Optional location, previous searches, preferences
    - **strategy**: fast, comprehensive, premium or cost_optimized (auto when omitted)
    """
    try:
        return await hub.intelligent_search(request)

    except HubException as e:
        logger.error(f"Hub error for query '{request.query}' ({request_id}): {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/analytics", response_model=AnalyticsDashboard)
async def analytics_dashboard(hub: IntelligenceHub = Depends(get_hub)):
    """Aggregate counters, per-source detail and performance scores"""
    return hub.get_analytics_dashboard()

@router.get("/sources")
async def source_status(hub: IntelligenceHub = Depends(get_hub)):
    """Per-source health, reliability and quota usage"""
    dashboard = hub.get_analytics_dashboard()
    return {"sources": [source.model_dump(mode="json") for source in dashboard.sources]}
