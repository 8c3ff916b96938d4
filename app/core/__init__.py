# app/core/__init__.py

# Only exceptions are re-exported here; import IntelligenceHub from app.core.hub
# directly to avoid circular imports with the service layer
from .exceptions import (
    HubException,
    SourceError,
    SourceTimeoutError,
    SourceTransportError,
    PlanningError,
    FusionError
)

__all__ = [
    "HubException",
    "SourceError",
    "SourceTimeoutError",
    "SourceTransportError",
    "PlanningError",
    "FusionError"
]
