"""Pytest configuration and fixtures for neo-auth-client tests."""

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import httpx
import jwt
import pytest
import pytest_asyncio

from neo_auth_client import (
    AuthClient,
    AuthClientSettings,
    MemoryLocalStorage,
    Session,
    User,
)

AUTH_URL = "https://auth.test"
USER_ID = "8f4c2a4e-7d51-4a7c-9b1e-2f0c6f0e9b11"

RouteHandler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]
RouteResponse = Union[httpx.Response, RouteHandler]


def user_payload(**overrides: Any) -> Dict[str, Any]:
    """User record as the auth server returns it."""
    payload = {
        "id": USER_ID,
        "aud": "authenticated",
        "role": "authenticated",
        "email": "ada@example.com",
        "email_confirmed_at": "2024-01-02T03:04:05Z",
        "app_metadata": {"provider": "email"},
        "user_metadata": {},
        "identities": [
            {
                "id": USER_ID,
                "identity_id": "0b5d8d9a-3c1e-4b8e-a1d4-7e6f5c4b3a21",
                "user_id": USER_ID,
                "provider": "email",
            }
        ],
        "created_at": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def session_payload(
    access_token: str = "access-token-1",
    refresh_token: str = "refresh-token-1",
    expires_in: int = 3600,
    **overrides: Any,
) -> Dict[str, Any]:
    """Session as the auth server returns it; expires_at is left out."""
    payload = {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": expires_in,
        "refresh_token": refresh_token,
        "user": user_payload(),
    }
    payload.update(overrides)
    return payload


def make_session(expires_in: int = 3600, **overrides: Any) -> Session:
    """Session that expires `expires_in` seconds from now (negative for past)."""
    payload = session_payload(expires_in=abs(expires_in), **overrides)
    payload["expires_at"] = int(time.time()) + expires_in
    return Session.model_validate(payload)


def make_jwt(**claims: Any) -> str:
    """Signed token; the client never verifies the signature."""
    payload = {"sub": USER_ID, "aud": "authenticated", "role": "authenticated"}
    payload.update(claims)
    return jwt.encode(payload, "neo-auth-client-test-signing-secret", algorithm="HS256")


class FakeAuthServer:
    """httpx.MockTransport handler recording every request.

    Routes are keyed by (method, path). A route answers with a fixed response
    or a handler, which may be a coroutine function. `delay` makes the answer
    asynchronous so concurrent callers can pile up behind it.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], RouteResponse] = {}
        self.requests: List[httpx.Request] = []
        self.delay = 0.0

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        handler: Optional[RouteHandler] = None,
    ) -> None:
        if handler is not None:
            self.routes[(method, path)] = handler
        elif content is not None:
            self.routes[(method, path)] = httpx.Response(status, content=content)
        else:
            self.routes[(method, path)] = httpx.Response(status, json=json)

    def calls(self, method: str, path: str, **params: str) -> List[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method
            and request.url.path == path
            and all(request.url.params.get(name) == value for name, value in params.items())
        ]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"msg": "Not found", "code": 404})
        if callable(route):
            response = route(request)
            if inspect.isawaitable(response):
                response = await response
            return response
        return httpx.Response(route.status_code, content=route.content, headers=route.headers)


@pytest.fixture
def settings():
    """PKCE settings pointing at the fake server."""
    return AuthClientSettings(url=AUTH_URL, api_key="anon-key")


@pytest.fixture
def storage():
    return MemoryLocalStorage()


@pytest.fixture
def auth_server():
    return FakeAuthServer()


@pytest_asyncio.fixture
async def http_client(auth_server):
    client = httpx.AsyncClient(transport=httpx.MockTransport(auth_server))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def client(settings, storage, http_client):
    """Auth client wired to the fake server."""
    auth_client = AuthClient(settings, storage=storage, http_client=http_client)
    yield auth_client
    await auth_client.close()


@pytest.fixture
def sample_user():
    return User.model_validate(user_payload())


class EventRecorder:
    """Listener collecting (event, session) pairs."""

    def __init__(self) -> None:
        self.events: List[Tuple[Any, Optional[Session]]] = []

    def __call__(self, event, session) -> None:
        self.events.append((event, session))

    @property
    def names(self) -> List[str]:
        return [event.value for event, _ in self.events]


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def session_factory():
    """Build sessions expiring relative to now."""
    return make_session


@pytest.fixture
def token_factory():
    """Build access tokens with the given claims."""
    return make_jwt


@pytest.fixture
def payloads():
    """Server payload builders."""
    return {"session": session_payload, "user": user_payload}
