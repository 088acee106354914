"""
Auth client application services.

Session coordination, event broadcasting, PKCE helpers and the client that
orchestrates them.
"""

from .session_manager import SessionManager
from .event_emitter import EventEmitter, ListenerRegistration, AuthStateChangeListener
from .code_verifier_store import CodeVerifierStore
from .pkce import (
    PKCEParams,
    generate_code_verifier,
    generate_code_challenge,
    code_challenge_method,
)
from .auth_client import AuthClient

__all__ = [
    "SessionManager",
    "EventEmitter",
    "ListenerRegistration",
    "AuthStateChangeListener",
    "CodeVerifierStore",
    "PKCEParams",
    "generate_code_verifier",
    "generate_code_challenge",
    "code_challenge_method",
    "AuthClient",
]
