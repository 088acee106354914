"""Session manager.

Single point of truth for the authoritative session. Owns the in-memory copy,
its persisted mirror, and single-flight coordination of refreshes.
"""

import asyncio
import logging
from typing import Optional

from ...core.entities import Session, StoredSession
from ...core.exceptions import SessionNotFound
from ...core.protocols import SessionRefresher
from ...infrastructure.repositories import SessionStorage

logger = logging.getLogger(__name__)


class SessionManager:
    """Serializes every read and write of the current session.

    One asyncio.Lock guards the cached session and its persisted mirror. The
    only coalescing point is the refresh path: while a refresh is in flight,
    every caller asking for a validated session awaits that same task.

    The persisted mirror is read only when nothing is cached in memory (for
    example after a process restart). Storage calls run in a worker thread
    while the lock is held.
    """

    def __init__(self, storage: SessionStorage, refresher: SessionRefresher):
        """Initialize session manager.

        Args:
            storage: Repository for the persisted session record
            refresher: Coroutine exchanging a refresh token for a new session
        """
        self._storage = storage
        self._refresher = refresher
        self._lock = asyncio.Lock()
        self._stored: Optional[StoredSession] = None
        self._refresh_task: Optional["asyncio.Task[Session]"] = None

    @property
    def refresh_in_flight(self) -> bool:
        """True while a refresh task is running."""
        return self._refresh_task is not None

    async def session(self, validate_expiration: bool = True) -> Session:
        """Return the current session, refreshing it when expired.

        Args:
            validate_expiration: When False, return the stored session even if
                it is expired

        Returns:
            Current (possibly freshly refreshed) session

        Raises:
            SessionNotFound: When no session is stored
            Exception: Any refresh error, identical for all coalesced callers
        """
        async with self._lock:
            stored = await self._load()
            if stored is None:
                raise SessionNotFound()

            if not validate_expiration or stored.is_valid:
                return stored.session

            task = self._refresh_task
            if task is None:
                logger.debug("Session expired, starting refresh")
                task = asyncio.create_task(self._run_refresh(stored.session.refresh_token))
                task.add_done_callback(_log_refresh_outcome)
                self._refresh_task = task
            else:
                logger.debug("Session expired, joining refresh in flight")

        # Shielded so that a cancelled caller does not cancel the refresh for
        # the other waiters.
        return await asyncio.shield(task)

    async def _run_refresh(self, refresh_token: str) -> Session:
        try:
            return await self._refresher(refresh_token)
        finally:
            self._refresh_task = None

    async def update(self, session: Session) -> None:
        """Replace the authoritative session and persist it.

        Raises:
            StorageError: When the mirror cannot be written; memory is left
                unchanged in that case
        """
        stored = StoredSession.from_session(session)
        async with self._lock:
            logger.debug("Updating session")
            await asyncio.to_thread(self._storage.store_session, stored)
            self._stored = stored

    async def remove(self) -> None:
        """Clear memory and the persisted copy. Idempotent.

        Raises:
            StorageError: When the persisted copy cannot be removed
        """
        async with self._lock:
            self._stored = None
            await asyncio.to_thread(self._storage.delete_session)

    async def remove_if_refresh_token(self, refresh_token: str) -> bool:
        """Clear the session only while it still carries `refresh_token`.

        A refresh rejected by the server must not remove a session stored
        after that refresh started.

        Returns:
            True when the session was removed
        """
        async with self._lock:
            stored = await self._load()
            if stored is None or stored.session.refresh_token != refresh_token:
                logger.debug("Stored session changed since the refresh started, keeping it")
                return False
            self._stored = None
            await asyncio.to_thread(self._storage.delete_session)
            return True

    async def _load(self) -> Optional[StoredSession]:
        # Caller holds the lock.
        if self._stored is None:
            self._stored = await asyncio.to_thread(self._storage.get_session)
            if self._stored is not None:
                logger.debug("Session restored from storage")
        return self._stored


def _log_refresh_outcome(task: "asyncio.Task[Session]") -> None:
    # Retrieves the exception so it is reported even when every waiter was
    # cancelled.
    if task.cancelled():
        logger.warning("Session refresh was cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.warning(f"Session refresh failed: {error}")
