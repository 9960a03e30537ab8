"""
Shared error handling for the Jokes service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for service errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ServiceError(ServiceException):
    """Service-related errors."""

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)


class DataFetchError(ServiceException):
    """Backing store could not deliver a result set."""


class DatabaseConnectionError(DataFetchError):
    """Backing store unreachable or no pooled connection could be acquired."""

    def __init__(self, message: str = "Database connection error", details: Optional[Dict[str, Any]] = None):
        super().__init__("DATABASE_CONNECTION_ERROR", message, details)


class DatabaseQueryError(DataFetchError):
    """Query failed against a live connection."""

    def __init__(self, message: str = "Database query error", details: Optional[Dict[str, Any]] = None):
        super().__init__("DATABASE_QUERY_ERROR", message, details)


class JokesUnavailableError(ServiceException):
    """Fetch failed and there is no cached data to fall back on."""

    def __init__(self, message: str = "Jokes unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("JOKES_UNAVAILABLE", message, details)
