"""Application layer: session coordination and auth operations."""

from .services import (
    AuthClient,
    CodeVerifierStore,
    EventEmitter,
    ListenerRegistration,
    SessionManager,
)

__all__ = [
    "AuthClient",
    "CodeVerifierStore",
    "EventEmitter",
    "ListenerRegistration",
    "SessionManager",
]
