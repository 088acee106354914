"""Contracts for external collaborators."""

from .local_storage import AuthLocalStorage
from .session_refresher import SessionRefresher

__all__ = [
    "AuthLocalStorage",
    "SessionRefresher",
]
