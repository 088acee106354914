"""
Unit tests for SessionManager.

Covers persistence round trips, the expiry margin and single-flight refresh
coordination under concurrent callers.
"""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from neo_auth_client import APIError, MemoryLocalStorage, SessionNotFound, StoredSession
from neo_auth_client.application import SessionManager
from neo_auth_client.infrastructure.repositories import SessionStorage


@pytest.fixture
def session_storage(storage):
    return SessionStorage(storage, "neo.auth.session")


def slow_refresher(result, delay=0.05):
    """Refresher mock that answers after a delay."""

    async def refresh(refresh_token):
        await asyncio.sleep(delay)
        if isinstance(result, Exception):
            raise result
        return result

    return AsyncMock(side_effect=refresh)


class TestStoredSession:
    """Test the persisted session wrapper."""

    def test_valid_61_seconds_before_expiry(self, session_factory):
        session = session_factory()
        now = time.time()
        stored = StoredSession.from_session(session, expiration_date=now + 61)
        assert stored.is_valid_at(now)

    def test_invalid_59_seconds_before_expiry(self, session_factory):
        session = session_factory()
        now = time.time()
        stored = StoredSession.from_session(session, expiration_date=now + 59)
        assert not stored.is_valid_at(now)

    def test_expiration_defaults_to_session_expires_at(self, session_factory):
        session = session_factory(expires_in=600)
        stored = StoredSession.from_session(session)
        assert stored.expiration_date == float(session.expires_at)
        assert stored.is_valid

    def test_expires_at_computed_when_missing(self, payloads):
        from neo_auth_client import Session

        before = time.time()
        session = Session.model_validate(payloads["session"](expires_in=3600))
        assert before + 3600 - 1 <= session.expires_at <= time.time() + 3600 + 1

    def test_serialized_record_shape(self, session_factory):
        stored = StoredSession.from_session(session_factory())
        raw = stored.to_json()
        assert b'"expirationDate"' in raw
        assert b'"session"' in raw
        assert StoredSession.from_json(raw) == stored


class TestSessionStorage:
    """Test the session record repository."""

    def test_store_then_load_round_trips(self, session_storage, session_factory):
        session = session_factory()
        stored_at = time.time()
        session_storage.store_session(StoredSession.from_session(session))

        loaded = session_storage.get_session()
        assert loaded.session == session
        assert abs(loaded.expiration_date - (stored_at + 3600)) <= 1

    def test_missing_record_loads_none(self, session_storage):
        assert session_storage.get_session() is None

    def test_corrupted_record_raises_storage_error(self, storage, session_storage):
        from neo_auth_client import StorageError

        storage.set("neo.auth.session", b'{"session": 42}')
        with pytest.raises(StorageError):
            session_storage.get_session()


class TestSessionManager:
    """Test session access and refresh coordination."""

    @pytest.mark.asyncio
    async def test_no_session_raises(self, session_storage):
        manager = SessionManager(session_storage, AsyncMock())
        with pytest.raises(SessionNotFound):
            await manager.session()

    @pytest.mark.asyncio
    async def test_valid_session_returned_without_refresh(self, session_storage, session_factory):
        refresher = AsyncMock()
        manager = SessionManager(session_storage, refresher)
        session = session_factory()
        await manager.update(session)

        assert await manager.session() == session
        refresher.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_session_returned_when_validation_skipped(
        self, session_storage, session_factory
    ):
        refresher = AsyncMock()
        manager = SessionManager(session_storage, refresher)
        expired = session_factory(expires_in=-30)
        await manager.update(expired)

        assert await manager.session(validate_expiration=False) == expired
        refresher.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove_then_session_not_found(self, session_storage, session_factory):
        manager = SessionManager(session_storage, AsyncMock())
        await manager.update(session_factory())
        await manager.remove()

        with pytest.raises(SessionNotFound):
            await manager.session(validate_expiration=False)
        assert session_storage.get_session() is None

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, session_storage):
        manager = SessionManager(session_storage, AsyncMock())
        await manager.remove()
        await manager.remove()

    @pytest.mark.asyncio
    async def test_remove_if_refresh_token_matches(self, session_storage, session_factory):
        manager = SessionManager(session_storage, AsyncMock())
        await manager.update(session_factory(refresh_token="refresh-token-1"))

        assert await manager.remove_if_refresh_token("refresh-token-1")
        with pytest.raises(SessionNotFound):
            await manager.session(validate_expiration=False)
        assert session_storage.get_session() is None

    @pytest.mark.asyncio
    async def test_remove_if_refresh_token_keeps_newer_session(self, session_storage, session_factory):
        manager = SessionManager(session_storage, AsyncMock())
        newer = session_factory(access_token="access-token-2", refresh_token="refresh-token-2")
        await manager.update(newer)

        assert not await manager.remove_if_refresh_token("refresh-token-1")
        assert await manager.session() == newer
        assert session_storage.get_session().session == newer

    @pytest.mark.asyncio
    async def test_remove_if_refresh_token_without_session(self, session_storage):
        manager = SessionManager(session_storage, AsyncMock())
        assert not await manager.remove_if_refresh_token("refresh-token-1")

    @pytest.mark.asyncio
    async def test_restores_from_storage_after_restart(self, storage, session_factory):
        session = session_factory()
        first = SessionManager(SessionStorage(storage, "key"), AsyncMock())
        await first.update(session)

        second = SessionManager(SessionStorage(storage, "key"), AsyncMock())
        assert await second.session() == session

    @pytest.mark.asyncio
    @pytest.mark.parametrize("callers", [1, 2, 10])
    async def test_concurrent_callers_share_one_refresh(
        self, session_storage, session_factory, callers
    ):
        refreshed = session_factory(access_token="access-token-2")
        refresher = slow_refresher(refreshed)
        manager = SessionManager(session_storage, refresher)
        await manager.update(session_factory(expires_in=-10))

        results = await asyncio.gather(*(manager.session() for _ in range(callers)))

        assert refresher.await_count == 1
        refresher.assert_awaited_with("refresh-token-1")
        assert all(result is refreshed for result in results)
        assert not manager.refresh_in_flight

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_refresh_error(self, session_storage, session_factory):
        error = APIError("Invalid Refresh Token", code="refresh_token_not_found", status=400)
        refresher = slow_refresher(error)
        manager = SessionManager(session_storage, refresher)
        await manager.update(session_factory(expires_in=-10))

        results = await asyncio.gather(
            *(manager.session() for _ in range(5)), return_exceptions=True
        )

        assert refresher.await_count == 1
        assert all(result is error for result in results)

    @pytest.mark.asyncio
    async def test_failed_refresh_can_be_retried(self, session_storage, session_factory):
        refreshed = session_factory(access_token="access-token-2")
        refresher = AsyncMock(side_effect=[APIError("Upstream down", status=503), refreshed])
        manager = SessionManager(session_storage, refresher)
        await manager.update(session_factory(expires_in=-10))

        with pytest.raises(APIError):
            await manager.session()
        assert not manager.refresh_in_flight

        assert await manager.session() is refreshed
        assert refresher.await_count == 2

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_refresh(self, session_storage, session_factory):
        refreshed = session_factory(access_token="access-token-2")
        refresher = slow_refresher(refreshed, delay=0.1)
        manager = SessionManager(session_storage, refresher)
        await manager.update(session_factory(expires_in=-10))

        first = asyncio.create_task(manager.session())
        second = asyncio.create_task(manager.session())
        await asyncio.sleep(0.02)
        assert manager.refresh_in_flight

        first.cancel()
        assert await second is refreshed
        assert first.cancelled()
        assert refresher.await_count == 1

    @pytest.mark.asyncio
    async def test_update_replaces_session(self, session_storage, session_factory):
        manager = SessionManager(session_storage, AsyncMock())
        await manager.update(session_factory(access_token="access-token-1"))
        replacement = session_factory(access_token="access-token-2")
        await manager.update(replacement)

        assert await manager.session() == replacement
        assert session_storage.get_session().session == replacement


@pytest.mark.asyncio
async def test_update_keeps_memory_when_storage_fails(mocker, session_factory):
    from neo_auth_client import StorageError

    storage = MemoryLocalStorage()
    manager = SessionManager(SessionStorage(storage, "key"), AsyncMock())
    original = session_factory(access_token="access-token-1")
    await manager.update(original)

    mocker.patch.object(storage, "set", side_effect=StorageError("disk full", key="key"))
    with pytest.raises(StorageError):
        await manager.update(session_factory(access_token="access-token-2"))

    assert await manager.session() == original
