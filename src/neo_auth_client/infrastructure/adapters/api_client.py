"""HTTP adapter for the remote auth server.

Single responsibility: ONLY sending requests to the auth server and turning
non-2xx answers into APIError / HTTPError. It knows nothing about local
session state apart from asking for a bearer token on authorized calls.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from ...config.settings import AuthClientSettings
from ...core.entities import Session
from ...core.exceptions import APIError, HTTPError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class Request:
    """A request to one auth server endpoint."""

    path: str
    method: str = "GET"
    query: Dict[str, Optional[str]] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Any] = None


@dataclass(frozen=True)
class Response:
    """Raw 2xx answer of the auth server."""

    status: int
    body: bytes

    def decoded(self, model: Type[T]) -> T:
        """Decode the body into a pydantic model."""
        return model.model_validate_json(self.body)


def parse_error(status: int, body: bytes) -> Exception:
    """Map a non-2xx answer to APIError when structured, else HTTPError.

    Args:
        status: HTTP status code
        body: Raw response body

    Returns:
        Exception to raise
    """
    try:
        data = json.loads(body) if body else None
    except ValueError:
        data = None

    if isinstance(data, dict):
        message = data.get("msg") or data.get("message") or data.get("error_description")
        if message:
            code = data.get("error_code") or data.get("code") or data.get("error")
            return APIError(
                str(message),
                code=str(code) if code is not None else None,
                hint=data.get("hint"),
                detail=data.get("detail") or data.get("details"),
                status=status,
            )

    return HTTPError(status, body)


class APIClient:
    """Auth server HTTP client built on httpx.

    Every request carries the configured default headers. Authorized requests
    add a bearer token taken from a validated session.
    """

    def __init__(
        self,
        settings: AuthClientSettings,
        session_provider: Callable[[], Awaitable[Session]],
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize API client.

        Args:
            settings: Client settings (base URL, headers, timeout)
            session_provider: Coroutine returning a valid session for authorized calls
            http_client: Optional preconfigured httpx client, owned by the caller
        """
        self._settings = settings
        self._session_provider = session_provider
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=settings.timeout)

    async def execute(self, request: Request) -> Response:
        """Send a request and return its 2xx response.

        Raises:
            APIError: Structured error answer
            HTTPError: Unstructured error answer
            httpx.TransportError: Network failure
        """
        headers = self._settings.request_headers()
        headers.update(request.headers)
        if request.body is not None:
            headers.setdefault("Content-Type", "application/json")

        query = {name: value for name, value in request.query.items() if value is not None}
        content = json.dumps(request.body).encode("utf-8") if request.body is not None else None
        url = f"{self._settings.url}{request.path}"

        logger.debug(f"{request.method} {request.path}")
        try:
            response = await self._http_client.request(
                request.method,
                url,
                params=query or None,
                headers=headers,
                content=content,
            )
        except httpx.TransportError as e:
            logger.warning(f"{request.method} {request.path} failed: {e}")
            raise

        if not 200 <= response.status_code < 300:
            error = parse_error(response.status_code, response.content)
            logger.info(f"{request.method} {request.path} -> {response.status_code}: {error}")
            raise error

        return Response(status=response.status_code, body=response.content)

    async def authorized_execute(self, request: Request) -> Response:
        """Send a request authenticated with the current session.

        Raises:
            SessionNotFound: When there is no local session
        """
        session = await self._session_provider()
        request.headers["Authorization"] = session.authorization_header
        return await self.execute(request)

    async def close(self) -> None:
        """Close the underlying httpx client when this instance created it."""
        if self._owns_client:
            await self._http_client.aclose()
