"""
Warden - API Error System
=========================

Centralized error codes and exception handling for consistent API responses.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.responses import Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """
    Centralized error codes for the API.

    Format: CATEGORY_SPECIFIC_ERROR
    """

    # Authentication errors (401)
    AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"
    AUTH_OAUTH_FAILED = "AUTH_OAUTH_FAILED"

    # User errors (500)
    USER_RESOLUTION_FAILED = "USER_RESOLUTION_FAILED"

    # Server errors (500)
    SERVER_ERROR = "SERVER_ERROR"


# =============================================================================
# Error Messages
# =============================================================================

ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.AUTH_MISSING_TOKEN: "No Discord token is stored for this session",
    ErrorCode.AUTH_OAUTH_FAILED: "Discord OAuth authentication failed",
    ErrorCode.USER_RESOLUTION_FAILED: "Couldn't find a user or create a new user",
    ErrorCode.SERVER_ERROR: "An internal server error occurred",
}


# =============================================================================
# Default Status Codes
# =============================================================================

ERROR_STATUS_CODES: Dict[ErrorCode, int] = {
    ErrorCode.AUTH_MISSING_TOKEN: HTTP_401_UNAUTHORIZED,
    ErrorCode.AUTH_OAUTH_FAILED: HTTP_401_UNAUTHORIZED,
    ErrorCode.USER_RESOLUTION_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVER_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


# =============================================================================
# API Error Exception
# =============================================================================

class APIError(HTTPException):
    """
    Custom API exception with error codes.

    Usage:
        raise APIError(ErrorCode.USER_RESOLUTION_FAILED)
        raise APIError(ErrorCode.AUTH_OAUTH_FAILED, details={"reason": "token exchange"})
    """

    def __init__(
        self,
        code: ErrorCode,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = code
        self.error_message = message or ERROR_MESSAGES.get(code, "An error occurred")
        self.error_details = details

        if status_code is None:
            status_code = ERROR_STATUS_CODES.get(code, HTTP_400_BAD_REQUEST)

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error_code": code.value,
                "message": self.error_message,
                "details": details,
            },
            headers=headers,
        )


class RedirectRequired(Exception):
    """
    Raised when a request must be answered with a prepared redirect.

    DESIGN:
        Used for expected outcomes (not logged in, OAuth state mismatch,
        stale session) so handlers deep in the call stack can short
        circuit. The app's exception handler returns `response` as is.
    """

    def __init__(self, response: Response) -> None:
        super().__init__(response.headers.get("location", ""))
        self.response = response


# =============================================================================
# Helper Functions
# =============================================================================

def error_response(
    code: ErrorCode,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Create a JSON error response without raising an exception.

    Useful for returning errors in exception handlers.
    """
    if status_code is None:
        status_code = ERROR_STATUS_CODES.get(code, HTTP_400_BAD_REQUEST)

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error_code": code.value,
            "message": message or ERROR_MESSAGES.get(code, "An error occurred"),
            "details": details,
        },
    )


__all__ = [
    "ErrorCode",
    "ERROR_MESSAGES",
    "ERROR_STATUS_CODES",
    "APIError",
    "RedirectRequired",
    "error_response",
]
