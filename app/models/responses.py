# app/models/responses.py
from pydantic import BaseModel, Field
from typing import List, Optional, Dict
from datetime import datetime, timezone

from app.models.internal import (
    CriticalConsensus,
    StreamingAvailability,
    TheaterShowtimes,
    SocialMetrics,
)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class EnhancedResult(BaseModel):
    id: str
    title: str
    overview: str = ""
    release_date: Optional[str] = None
    rating: Optional[float] = None
    vote_count: int = 0
    popularity: float = 0.0
    original_language: Optional[str] = None
    media_type: str = "movie"
    genres: List[str] = Field(default_factory=list)
    poster_url: Optional[str] = None

    sources: List[str] = Field(..., min_length=1, description="Contributing source ids")
    confidence: float = Field(..., ge=0.0, le=100.0)
    cultural_relevance: float = Field(..., ge=0.0, le=100.0)
    trending_score: float = Field(..., ge=0.0, le=100.0)
    score: float = Field(default=0.0, description="Composite fusion score")

    critical_consensus: Optional[CriticalConsensus] = None
    streaming_availability: Optional[Dict[str, StreamingAvailability]] = None
    theater_showtimes: Optional[Dict[str, TheaterShowtimes]] = None
    social_metrics: Optional[SocialMetrics] = None

    @property
    def release_year(self) -> int:
        if self.release_date and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return 0

class SearchMetadata(BaseModel):
    total_results: int = 0
    sources_used: List[str] = Field(default_factory=list)
    failed_sources: List[str] = Field(default_factory=list)
    search_time: float = Field(0.0, description="Wall-clock search time in milliseconds")
    confidence: float = Field(0.0, ge=0.0, le=100.0)
    strategy: str
    cost_incurred: float = 0.0
    cached: bool = False

class SearchAnalytics(BaseModel):
    source_performance: Dict[str, float] = Field(default_factory=dict)
    cache_hit_rate: float = 0.0
    failover_events: int = 0

class SearchResult(BaseModel):
    query: str
    results: List[EnhancedResult] = Field(default_factory=list)
    metadata: SearchMetadata
    analytics: SearchAnalytics = Field(default_factory=SearchAnalytics)
    timestamp: datetime = Field(default_factory=_utcnow)

class AnalyticsOverview(BaseModel):
    total_requests: int = 0
    average_response_time: float = 0.0
    cache_hit_rate: float = 0.0
    failover_events: int = 0
    total_cost: float = 0.0
    source_usage: Dict[str, int] = Field(default_factory=dict)

class SourceDetail(BaseModel):
    id: str
    name: str
    health_status: str
    reliability: int
    response_time: float
    daily_usage: int
    daily_limit: int
    usage_percentage: float
    last_health_check: Optional[datetime] = None

class AnalyticsDashboard(BaseModel):
    overview: AnalyticsOverview
    sources: List[SourceDetail] = Field(default_factory=list)
    performance: Dict[str, float] = Field(default_factory=dict)

class SystemHealth(BaseModel):
    status: str = Field(..., description="healthy, degraded or critical")
    health_percentage: float
    active_sources: int
    total_sources: int
    last_updated: datetime = Field(default_factory=_utcnow)

class HealthResponse(BaseModel):
    status: str = Field(..., description="Overall system status")
    timestamp: datetime = Field(default_factory=_utcnow)
    services: Dict[str, str] = Field(..., description="Individual service statuses")
    response_time_ms: Optional[float] = Field(None, description="Health check response time")

class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    request_id: Optional[str] = Field(None, description="Request ID for tracking")
    timestamp: datetime = Field(default_factory=_utcnow)
