"""Pending PKCE verifier repository."""

import logging
from typing import Optional

from ...core.exceptions import CodeVerifierNotFound
from ...core.protocols import AuthLocalStorage

logger = logging.getLogger(__name__)


class CodeVerifierStore:
    """Holds at most one pending code verifier.

    The verifier lives in the same local storage as the session so that a
    redirect flow started before a process restart can still be completed.
    Blocking, like SessionStorage: async callers go through a worker thread.
    """

    def __init__(self, storage: AuthLocalStorage, key: str):
        self.storage = storage
        self.key = key

    def set(self, verifier: str) -> None:
        """Store the verifier, replacing any previous one."""
        self.storage.set(self.key, verifier.encode("utf-8"))

    def get(self) -> Optional[str]:
        raw = self.storage.get(self.key)
        if raw is None:
            return None
        return raw.decode("utf-8")

    def require(self) -> str:
        """Return the pending verifier.

        Raises:
            CodeVerifierNotFound: When no flow is pending
        """
        verifier = self.get()
        if not verifier:
            raise CodeVerifierNotFound()
        return verifier

    def clear(self) -> None:
        logger.debug("Clearing pending code verifier")
        self.storage.remove(self.key)
