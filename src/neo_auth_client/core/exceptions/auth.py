"""Authentication-specific exceptions for neo-auth-client."""

from typing import Optional

from .base import NeoAuthError


class SessionNotFound(NeoAuthError):
    """Raised when no local credentials are available."""

    def __init__(self, message: str = "Auth session not found"):
        super().__init__(message, error_code="session_not_found")


class PKCEError(NeoAuthError):
    """Base exception for PKCE flow mismatches."""
    pass


class CodeVerifierNotFound(PKCEError):
    """Raised when a code exchange is attempted without a pending verifier."""

    def __init__(self, message: str = "PKCE code verifier not found in storage"):
        super().__init__(message, error_code="code_verifier_not_found")


class InvalidPKCEFlowURL(PKCEError):
    """Raised when a callback URL is not a valid PKCE redirect."""

    def __init__(self, message: str = "Not a valid PKCE flow url"):
        super().__init__(message, error_code="invalid_pkce_flow_url")


class InvalidImplicitGrantFlowURL(NeoAuthError):
    """Raised when a callback URL is not a valid implicit grant redirect."""

    def __init__(self, message: str = "Not a valid implicit grant flow url"):
        super().__init__(message, error_code="invalid_implicit_grant_flow_url")


class MissingExpClaim(NeoAuthError):
    """Raised when an access token carries no readable exp claim."""

    def __init__(self, message: str = "Missing expiration claim on access token"):
        super().__init__(message, error_code="missing_exp_claim")


class APIError(NeoAuthError):
    """Structured rejection returned by the auth server."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        detail: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(
            message,
            error_code=code or "api_error",
            details={"code": code, "hint": hint, "detail": detail, "status": status},
        )
        self.code = code
        self.hint = hint
        self.detail = detail
        self.status = status


class HTTPError(NeoAuthError):
    """Unstructured non-2xx response from the auth server."""

    def __init__(self, status: int, body: bytes):
        self.status = status
        self.body = body
        message = f"Status Code: {status}"
        text = body.decode("utf-8", errors="replace") if body else ""
        if text:
            message += f" Body: {text}"
        super().__init__(message, error_code="http_error", details={"status": status})


class StorageError(NeoAuthError):
    """Raised when local persistence I/O fails."""

    def __init__(self, message: str, *, key: Optional[str] = None):
        super().__init__(message, error_code="storage_error", details={"key": key})
        self.key = key
