"""Local storage backends and the session record repository."""

from .memory_storage import MemoryLocalStorage
from .file_storage import FileLocalStorage
from .redis_storage import RedisLocalStorage
from .session_storage import SessionStorage

__all__ = [
    "MemoryLocalStorage",
    "FileLocalStorage",
    "RedisLocalStorage",
    "SessionStorage",
]
