"""Local storage protocol contract."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class AuthLocalStorage(Protocol):
    """Protocol for durable key/value storage of auth state.

    Defines ONLY the contract for byte persistence. Implementations may block
    on I/O; callers run them off the event loop. Implementations must not call
    back into session operations.

    Every method raises StorageError on I/O failure.
    """

    def get(self, key: str) -> Optional[bytes]:
        """Read the value stored under key, None when absent."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete key; succeeds when the key is absent."""
        ...
