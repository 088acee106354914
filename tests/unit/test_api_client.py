"""Unit tests for the auth server HTTP adapter."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from neo_auth_client import APIError, AuthClientSettings, HTTPError, SessionNotFound
from neo_auth_client.infrastructure.adapters import APIClient, Request, parse_error


class TestParseError:
    """Test mapping of non-2xx answers."""

    def test_structured_body_becomes_api_error(self):
        body = json.dumps(
            {"msg": "Invalid login credentials", "error_code": "invalid_credentials", "hint": "check password"}
        ).encode()

        error = parse_error(400, body)

        assert isinstance(error, APIError)
        assert error.message == "Invalid login credentials"
        assert error.code == "invalid_credentials"
        assert error.hint == "check password"
        assert error.status == 400

    @pytest.mark.parametrize("field", ["msg", "message", "error_description"])
    def test_message_fields(self, field):
        error = parse_error(422, json.dumps({field: "boom"}).encode())
        assert isinstance(error, APIError)
        assert str(error) == "boom"

    def test_non_json_body_becomes_http_error(self):
        error = parse_error(502, b"<html>Bad Gateway</html>")

        assert isinstance(error, HTTPError)
        assert error.status == 502
        assert error.body == b"<html>Bad Gateway</html>"
        assert "502" in str(error)

    def test_json_without_message_becomes_http_error(self):
        error = parse_error(500, b'{"unexpected": true}')
        assert isinstance(error, HTTPError)


class TestAPIClient:
    """Test request building and error propagation."""

    @pytest.mark.asyncio
    async def test_default_headers_and_json_body(self, settings, auth_server, http_client):
        auth_server.on("POST", "/otp", json={})
        api = APIClient(settings, AsyncMock(), http_client)

        await api.execute(
            Request("/otp", method="POST", query={"redirect_to": None}, body={"email": "ada@example.com"})
        )

        request = auth_server.requests[0]
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["X-Client-Info"].startswith("neo-auth-client/")
        assert request.headers["Content-Type"] == "application/json"
        assert "redirect_to" not in request.url.params
        assert json.loads(request.content) == {"email": "ada@example.com"}

    @pytest.mark.asyncio
    async def test_custom_headers_are_sent(self, auth_server, http_client):
        settings = AuthClientSettings(url="https://auth.test/", headers={"X-Tenant": "acme"})
        auth_server.on("GET", "/settings", json={})
        api = APIClient(settings, AsyncMock(), http_client)

        await api.execute(Request("/settings"))

        assert auth_server.requests[0].headers["X-Tenant"] == "acme"
        assert str(auth_server.requests[0].url) == "https://auth.test/settings"

    @pytest.mark.asyncio
    async def test_error_status_raises_api_error(self, settings, auth_server, http_client):
        auth_server.on("POST", "/token", status=400, json={"error": "invalid_grant", "error_description": "Invalid Refresh Token"})
        api = APIClient(settings, AsyncMock(), http_client)

        with pytest.raises(APIError) as exc_info:
            await api.execute(Request("/token", method="POST", body={}))

        assert exc_info.value.status == 400
        assert exc_info.value.code == "invalid_grant"

    @pytest.mark.asyncio
    async def test_error_status_raises_http_error(self, settings, auth_server, http_client):
        auth_server.on("GET", "/user", status=503, content=b"upstream unavailable")
        api = APIClient(settings, AsyncMock(), http_client)

        with pytest.raises(HTTPError) as exc_info:
            await api.execute(Request("/user"))
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http_client:
            api = APIClient(settings, AsyncMock(), http_client)
            with pytest.raises(httpx.ConnectError):
                await api.execute(Request("/user"))

    @pytest.mark.asyncio
    async def test_authorized_execute_adds_bearer(self, settings, auth_server, http_client, session_factory):
        session = session_factory()
        auth_server.on("GET", "/reauthenticate", json={})
        api = APIClient(settings, AsyncMock(return_value=session), http_client)

        await api.authorized_execute(Request("/reauthenticate"))

        assert auth_server.requests[0].headers["Authorization"] == "Bearer access-token-1"

    @pytest.mark.asyncio
    async def test_authorized_execute_without_session(self, settings, auth_server, http_client):
        api = APIClient(settings, AsyncMock(side_effect=SessionNotFound()), http_client)

        with pytest.raises(SessionNotFound):
            await api.authorized_execute(Request("/reauthenticate"))
        assert auth_server.requests == []

    @pytest.mark.asyncio
    async def test_close_leaves_borrowed_client_open(self, settings, http_client):
        api = APIClient(settings, AsyncMock(), http_client)
        await api.close()
        assert not http_client.is_closed
