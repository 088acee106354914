"""Infrastructure layer: remote auth server adapter and storage backends."""

from .adapters import APIClient, Request, Response
from .repositories import (
    MemoryLocalStorage,
    FileLocalStorage,
    RedisLocalStorage,
    SessionStorage,
)

__all__ = [
    "APIClient",
    "Request",
    "Response",
    "MemoryLocalStorage",
    "FileLocalStorage",
    "RedisLocalStorage",
    "SessionStorage",
]
