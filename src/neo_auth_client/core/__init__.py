"""Core auth client domain objects.

Components:
- value_objects: enumerations and request parameter models
- exceptions: error taxonomy
- entities: session, user and persisted session records
- protocols: contracts for storage and refresh collaborators
"""

from .value_objects import AuthChangeEvent, AuthFlowType, SignOutScope
from .exceptions import NeoAuthError, SessionNotFound, APIError, HTTPError, StorageError
from .entities import Session, StoredSession, User
from .protocols import AuthLocalStorage, SessionRefresher

__all__ = [
    "AuthChangeEvent",
    "AuthFlowType",
    "SignOutScope",
    "NeoAuthError",
    "SessionNotFound",
    "APIError",
    "HTTPError",
    "StorageError",
    "Session",
    "StoredSession",
    "User",
    "AuthLocalStorage",
    "SessionRefresher",
]
