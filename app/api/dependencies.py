# app/api/dependencies.py
import time
import logging
from fastapi import HTTPException, Request

from app.core.exceptions import ServiceUnavailableException
from app.core.hub import IntelligenceHub

logger = logging.getLogger(__name__)

def get_hub(request: Request) -> IntelligenceHub:
    """Hub instance created by the application lifespan"""
    hub = getattr(request.app.state, "hub", None)
    if hub is None:
        raise ServiceUnavailableException("Intelligence hub is not initialized")
    return hub

async def check_content_length(request: Request):
    """Check request content length"""
    try:
        content_length = request.headers.get("content-length")
        if content_length:
            length = int(content_length)
            max_length = 10 * 1024  # 10KB max
            if length > max_length:
                raise HTTPException(
                    status_code=413,
                    detail=f"Request too large. Maximum size: {max_length} bytes"
                )
    except ValueError:
        pass  # Ignore invalid content-length headers

async def validate_request_id(request: Request) -> str:
    """Get or validate request ID"""
    request_id = getattr(request.state, 'request_id', None)
    if not request_id:
        request_id = f"req_{int(time.time() * 1000)}"
        request.state.request_id = request_id
    return request_id
