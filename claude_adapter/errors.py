"""
Error Definitions

Defines the adapter's exception classes and maps any exception onto the
Anthropic Messages error envelope for the non-streaming path.
"""

from typing import Any, Dict, Optional, Tuple

import httpx
import openai


class AppError(Exception):
    """
    Application Base Exception

    Base class for all adapter exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "api_error",
        code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Anthropic error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = False) -> Dict[str, Any]:
        """
        Convert to the Anthropic error envelope

        Returns:
            dict: Error information dictionary
        """
        result = {
            "type": "error",
            "error": {
                "type": self.error_type,
                "message": self.message,
            },
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class InvalidRequestError(AppError):
    """
    Invalid Request Error

    Raised when the inbound Anthropic request fails validation.
    """

    def __init__(
        self,
        message: str = "Invalid request",
        code: str = "invalid_request",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            code=code,
            details=details,
            status_code=400,
        )


class UpstreamError(AppError):
    """
    Upstream Service Error

    Raised when the backend returns something the adapter cannot use.
    """

    def __init__(
        self,
        message: str = "Upstream service error",
        code: str = "upstream_error",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 502,
    ):
        super().__init__(
            message=message,
            error_type="api_error",
            code=code,
            details=details,
            status_code=status_code,
        )


_ERROR_TYPES_BY_STATUS = {
    400: "invalid_request_error",
    401: "authentication_error",
    403: "permission_error",
    404: "not_found_error",
    429: "rate_limit_error",
}


def error_type_for_status(status_code: int) -> str:
    """Map an HTTP status code onto an Anthropic error type."""
    return _ERROR_TYPES_BY_STATUS.get(status_code, "api_error")


def status_code_for_exception(exc: BaseException) -> int:
    """Extract the HTTP status carried by an exception, defaulting to 500."""
    if isinstance(exc, AppError):
        return exc.status_code
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return 500


def create_error_response(exc: BaseException) -> Tuple[int, Dict[str, Any]]:
    """
    Build the Anthropic error response for an exception

    Returns:
        tuple: (HTTP status code, error body)
    """
    if isinstance(exc, AppError):
        return exc.status_code, exc.to_dict()

    status_code = status_code_for_exception(exc)
    body = {
        "type": "error",
        "error": {
            "type": error_type_for_status(status_code),
            "message": str(exc),
        },
    }
    return status_code, body
