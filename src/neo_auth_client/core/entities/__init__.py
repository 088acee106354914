"""Core entities for the auth client."""

from .user import User, UserIdentity, Factor
from .session import Session
from .stored_session import StoredSession
from .responses import AuthResponse, SSOResponse, ResendMobileResponse

__all__ = [
    "User",
    "UserIdentity",
    "Factor",
    "Session",
    "StoredSession",
    "AuthResponse",
    "SSOResponse",
    "ResendMobileResponse",
]
