"""
Error Codes and Exceptions.

Every failure the service reports to a client is a VoicegenError. The API
layer maps the error code to an HTTP status:

    TEXT_TOO_LONG   -> 400 Bad Request
    NOT_FOUND       -> 404 Not Found
    UPSTREAM_ERROR  -> 500 Internal Server Error
    INTERNAL_ERROR  -> 500 Internal Server Error

Response body format:
    {"success": false, "error": "<message>", "code": "<ERROR_CODE>"}
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    TEXT_TOO_LONG = "TEXT_TOO_LONG"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


HTTP_STATUS = {
    ErrorCode.TEXT_TOO_LONG: 400,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.UPSTREAM_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


class VoicegenError(Exception):
    """
    Base exception for client-visible failures.

    Attributes:
        message: Human-readable message, forwarded to the client.
        code: Error code from ErrorCode.
        details: Optional context for logs; never sent to clients.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
        }


class ValidationError(VoicegenError):
    """Raised when a request fails input bounds, before any upstream call."""
    def __init__(self, message: str, code: str = ErrorCode.INVALID_INPUT, details: Optional[Dict] = None):
        super().__init__(message, code, details)


class NotFoundError(VoicegenError):
    """Raised when an audio code is not present in the resource cache."""
    def __init__(self, message: str = "Audio file not found", details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.NOT_FOUND, details)


class UpstreamError(VoicegenError):
    """Raised when a collaborator call or the proxy fetch fails."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.UPSTREAM_ERROR, details)
