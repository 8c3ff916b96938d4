# app/models/requests.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Tuple, Dict, Any
from enum import Enum

class SearchStrategy(str, Enum):
    FAST = "fast"
    COMPREHENSIVE = "comprehensive"
    PREMIUM = "premium"
    COST_OPTIMIZED = "cost_optimized"

class ContentType(str, Enum):
    MOVIE = "movie"
    TV = "tv"
    BOTH = "both"

class SearchFilters(BaseModel):
    genres: List[str] = Field(default_factory=list)
    year_range: Optional[Tuple[int, int]] = None
    rating_range: Optional[Tuple[float, float]] = None
    region: Optional[str] = None
    language: Optional[str] = None
    content_type: Optional[ContentType] = None

    @field_validator("year_range", "rating_range")
    @classmethod
    def validate_range(cls, v):
        if v is not None and v[0] > v[1]:
            raise ValueError("Range lower bound must not exceed upper bound")
        return v

class UserContext(BaseModel):
    location: Optional[str] = None
    previous_searches: List[str] = Field(default_factory=list)
    preferences: Dict[str, Any] = Field(default_factory=dict)

class SearchRequest(BaseModel):
    query: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Free-text title or topic to search for"
    )
    filters: SearchFilters = Field(default_factory=SearchFilters)
    user_context: UserContext = Field(default_factory=UserContext)
    strategy: Optional[SearchStrategy] = Field(
        default=None,
        description="Explicit strategy; chosen automatically when omitted"
    )
    max_results: int = Field(
        default=20,
        ge=1,
        le=50,
        description="Maximum number of fused results to return"
    )

    @field_validator("query")
    @classmethod
    def validate_query(cls, v):
        if not v.strip():
            raise ValueError("Query cannot be empty or whitespace only")
        return v.strip()

    @property
    def region(self) -> Optional[str]:
        """Region the user is searching from, if known"""
        region = self.user_context.location or self.filters.region
        return region.strip().lower() if region and region.strip() else None
