# app/models/__init__.py
"""Data models"""

from .requests import SearchRequest, SearchFilters, UserContext, SearchStrategy, ContentType
from .responses import (
    EnhancedResult,
    SearchResult,
    SearchMetadata,
    SearchAnalytics,
    AnalyticsDashboard,
    SystemHealth,
    HealthResponse,
    ErrorResponse
)
from .internal import (
    ContentSource,
    ContentItem,
    SourceType,
    HealthStatus,
    ExecutionPlan,
    FanOutOutcome
)

__all__ = [
    "SearchRequest",
    "SearchFilters",
    "UserContext",
    "SearchStrategy",
    "ContentType",
    "EnhancedResult",
    "SearchResult",
    "SearchMetadata",
    "SearchAnalytics",
    "AnalyticsDashboard",
    "SystemHealth",
    "HealthResponse",
    "ErrorResponse",
    "ContentSource",
    "ContentItem",
    "SourceType",
    "HealthStatus",
    "ExecutionPlan",
    "FanOutOutcome"
]
