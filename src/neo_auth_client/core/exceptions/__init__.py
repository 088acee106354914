"""Exception hierarchy for neo-auth-client."""

from .base import NeoAuthError, create_error_response
from .auth import (
    SessionNotFound,
    PKCEError,
    CodeVerifierNotFound,
    InvalidPKCEFlowURL,
    InvalidImplicitGrantFlowURL,
    MissingExpClaim,
    APIError,
    HTTPError,
    StorageError,
)

__all__ = [
    "NeoAuthError",
    "create_error_response",
    "SessionNotFound",
    "PKCEError",
    "CodeVerifierNotFound",
    "InvalidPKCEFlowURL",
    "InvalidImplicitGrantFlowURL",
    "MissingExpClaim",
    "APIError",
    "HTTPError",
    "StorageError",
]
