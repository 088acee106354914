"""Persisted session record repository."""

import logging
from typing import Optional

from pydantic import ValidationError

from ...core.entities import StoredSession
from ...core.exceptions import StorageError
from ...core.protocols import AuthLocalStorage

logger = logging.getLogger(__name__)


class SessionStorage:
    """Reads and writes the StoredSession record under one fixed key.

    Handles ONLY serialization of the session mirror. Blocking: the session
    manager calls it from a worker thread.
    """

    def __init__(self, storage: AuthLocalStorage, key: str):
        self.storage = storage
        self.key = key

    def get_session(self) -> Optional[StoredSession]:
        """Load the persisted record.

        Raises:
            StorageError: When the backend fails or the record is corrupted
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return None
        try:
            return StoredSession.from_json(raw)
        except ValidationError as e:
            logger.error(f"Stored session under {self.key} is corrupted: {e.error_count()} errors")
            raise StorageError("Stored session record is corrupted", key=self.key) from e

    def store_session(self, stored: StoredSession) -> None:
        self.storage.set(self.key, stored.to_json())

    def delete_session(self) -> None:
        logger.info("Deleting session")
        self.storage.remove(self.key)
