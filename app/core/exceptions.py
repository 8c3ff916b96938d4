# app/core/exceptions.py
from fastapi import HTTPException

class CustomHTTPException(HTTPException):
    def __init__(self, status_code: int, detail: str, error_code: str = None):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code

class HubException(Exception):
    """Exception raised when the hub itself fails to process a request"""
    pass

class SourceError(Exception):
    """Base class for failures of a single external source"""

    def __init__(self, source_id: str, message: str = ""):
        super().__init__(f"{source_id}: {message}" if message else source_id)
        self.source_id = source_id

class SourceTimeoutError(SourceError):
    """A source did not answer within the fan-out timeout"""
    pass

class SourceTransportError(SourceError):
    """A source call failed (network, HTTP status, parse error)"""
    pass

class PlanningError(Exception):
    """No eligible source can serve a request"""
    pass

class FusionError(Exception):
    """A raw entity could not be turned into a canonical record"""
    pass

class ServiceUnavailableException(CustomHTTPException):
    def __init__(self, detail: str = "Service temporarily unavailable"):
        super().__init__(status_code=503, detail=detail, error_code="SERVICE_UNAVAILABLE")
