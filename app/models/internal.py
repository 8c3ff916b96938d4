# app/models/internal.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

class SourceType(str, Enum):
    API = "api"
    SCRAPER = "scraper"
    HYBRID = "hybrid"

class HealthStatus(str, Enum):
    ACTIVE = "active"
    DEGRADED = "degraded"
    INACTIVE = "inactive"

class ContentSource(BaseModel):
    """Configuration and live operational state of one external provider"""
    id: str
    name: str
    type: SourceType
    endpoint: Optional[str] = None
    health_status: HealthStatus = HealthStatus.ACTIVE
    last_health_check: Optional[datetime] = None
    response_time: float = Field(default=500.0, ge=0.0)
    reliability: int = Field(default=80, ge=0, le=100)
    cost_per_request: float = Field(default=0.0, ge=0.0)
    daily_limit: int = Field(default=1000, ge=0)
    daily_usage: int = Field(default=0, ge=0)
    priority: int = Field(default=5, ge=0)
    capabilities: List[str] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=lambda: ["global"])
    consecutive_failures: int = Field(default=0, ge=0)

    @field_validator("regions", "capabilities")
    @classmethod
    def normalize_tags(cls, v):
        return [tag.strip().lower() for tag in v if tag and tag.strip()]

    @property
    def has_quota(self) -> bool:
        return self.daily_usage < self.daily_limit

    def serves_region(self, region: Optional[str]) -> bool:
        if not region:
            return True
        return "global" in self.regions or region.lower() in self.regions

class CriticalConsensus(BaseModel):
    rotten_tomatoes: Optional[float] = None
    imdb: Optional[float] = None
    letterboxd: Optional[float] = None
    metacritic: Optional[float] = None

class StreamingAvailability(BaseModel):
    providers: List[str] = Field(default_factory=list)
    last_updated: Optional[datetime] = None

class Theater(BaseModel):
    name: str
    showtimes: List[str] = Field(default_factory=list)

class TheaterShowtimes(BaseModel):
    theaters: List[Theater] = Field(default_factory=list)

class SocialMetrics(BaseModel):
    letterboxd_watched: int = 0
    letterboxd_liked: int = 0
    twitter_mentions: int = 0
    trending_rank: Optional[int] = None

class ContentItem(BaseModel):
    """Canonical record returned by a source adapter"""
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    overview: str = ""
    release_date: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    vote_count: int = Field(default=0, ge=0)
    popularity: float = Field(default=0.0, ge=0.0)
    original_language: Optional[str] = None
    media_type: str = "movie"
    genres: List[str] = Field(default_factory=list)
    poster_url: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    production_regions: List[str] = Field(default_factory=list)

    critical_consensus: Optional[CriticalConsensus] = None
    streaming_availability: Optional[Dict[str, StreamingAvailability]] = None
    theater_showtimes: Optional[Dict[str, TheaterShowtimes]] = None
    social_metrics: Optional[SocialMetrics] = None

    @property
    def release_year(self) -> int:
        if self.release_date and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return 0

@dataclass
class ExecutionPlan:
    strategy: str
    sources: List[ContentSource]
    region: Optional[str] = None

    @property
    def source_ids(self) -> List[str]:
        return [source.id for source in self.sources]

@dataclass
class FanOutOutcome:
    results: Dict[str, list] = field(default_factory=dict)
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
