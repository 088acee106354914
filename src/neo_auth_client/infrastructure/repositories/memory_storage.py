"""In-memory local storage."""

import threading
from typing import Dict, Optional


class MemoryLocalStorage:
    """Process-lifetime storage backed by a dictionary.

    Handles ONLY in-memory byte storage. Safe to call from worker threads.
    """

    def __init__(self) -> None:
        self._items: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._items[key] = bytes(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
