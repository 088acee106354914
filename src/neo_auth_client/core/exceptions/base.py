"""Base exceptions for neo-auth-client.

All exceptions inherit from NeoAuthError and carry an error code and a
details mapping so callers can log or surface them uniformly.
"""

from typing import Any, Dict, Optional


class NeoAuthError(Exception):
    """Base exception for all neo-auth-client errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


def create_error_response(exception: NeoAuthError) -> Dict[str, Any]:
    """Create standardized error payload from exception.

    Args:
        exception: The neo-auth-client exception

    Returns:
        Error dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
