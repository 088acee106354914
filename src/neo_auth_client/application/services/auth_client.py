"""
Auth client orchestration.

Sequences remote calls against the auth server with SessionManager updates
and EventEmitter notifications. An operation that establishes a session
persists it first and only then notifies listeners; an operation that fails
propagates the error and leaves local state as it was before the remote call.
"""

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

import httpx

from ...config.constants import INVALID_REFRESH_STATUSES, SIGN_OUT_IGNORED_STATUSES
from ...config.settings import AuthClientSettings
from ...core.entities import (
    AuthResponse,
    ResendMobileResponse,
    Session,
    SSOResponse,
    User,
    UserIdentity,
)
from ...core.exceptions import (
    APIError,
    HTTPError,
    InvalidImplicitGrantFlowURL,
    InvalidPKCEFlowURL,
    SessionNotFound,
)
from ...core.protocols import AuthLocalStorage
from ...core.value_objects import (
    AuthChangeEvent,
    AuthFlowType,
    EmailOTPType,
    MessagingChannel,
    MobileOTPType,
    OpenIDConnectCredentials,
    Provider,
    ResendEmailType,
    ResendMobileType,
    SignOutScope,
    UserAttributes,
)
from ...infrastructure.adapters import APIClient, Request
from ...infrastructure.repositories import MemoryLocalStorage, SessionStorage
from ...utils import decode_jwt_claims, extract_url_params, read_exp_claim
from .code_verifier_store import CodeVerifierStore
from .event_emitter import AuthStateChangeListener, EventEmitter, ListenerRegistration
from .pkce import PKCEParams, code_challenge_method, generate_code_challenge, generate_code_verifier
from .session_manager import SessionManager

logger = logging.getLogger(__name__)


def _meta_security(captcha_token: Optional[str]) -> Optional[Dict[str, str]]:
    return {"captcha_token": captcha_token} if captcha_token else None


def _body(**fields: Any) -> Dict[str, Any]:
    """JSON body without unset fields."""
    return {name: value for name, value in fields.items() if value is not None}


def _require_email_or_phone(email: Optional[str], phone: Optional[str]) -> None:
    if (email is None) == (phone is None):
        raise ValueError("You must provide either an email or a phone number")


def _parse_number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class AuthClient:
    """
    Client for the auth server.

    Owns one SessionManager, one EventEmitter, one CodeVerifierStore and one
    APIClient, all built from the same settings object.

    Usage:
        settings = AuthClientSettings(url="https://auth.example.com/auth/v1")
        async with AuthClient(settings) as client:
            await client.sign_in_with_password(email="a@b.c", password="secret")
            session = await client.get_session()
    """

    def __init__(
        self,
        settings: AuthClientSettings,
        storage: Optional[AuthLocalStorage] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize auth client.

        Args:
            settings: Client settings, the only configuration source
            storage: Local storage backend, in-memory when omitted
            http_client: Optional preconfigured httpx client, owned by the caller
        """
        self.settings = settings
        self.storage = storage if storage is not None else MemoryLocalStorage()

        self._session_manager = SessionManager(
            SessionStorage(self.storage, settings.storage_key),
            self._refresh_with_token,
        )
        self._event_emitter = EventEmitter()
        self._code_verifiers = CodeVerifierStore(self.storage, settings.code_verifier_key)
        self._api = APIClient(settings, self._session_manager.session, http_client)

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    @property
    def event_emitter(self) -> EventEmitter:
        return self._event_emitter

    async def __aenter__(self) -> "AuthClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop listener delivery and release the HTTP client."""
        await self._event_emitter.close()
        await self._api.close()

    # Listeners

    def on_auth_state_change(self, listener: AuthStateChangeListener) -> ListenerRegistration:
        """Subscribe to auth state changes.

        Returns immediately. The first event the listener receives is always
        initialSession, carrying the current session or None.

        Args:
            listener: Plain or coroutine function called with (event, session)

        Returns:
            Registration handle; call remove() to unsubscribe
        """
        return self._event_emitter.attach_listener(listener, self._session_manager.session)

    async def auth_state_changes(self) -> AsyncIterator[Tuple[AuthChangeEvent, Optional[Session]]]:
        """Iterate over auth state changes, starting with initialSession.

        The subscription is removed when the iterator is closed.
        """
        queue: "asyncio.Queue[Tuple[AuthChangeEvent, Optional[Session]]]" = asyncio.Queue()
        registration = self.on_auth_state_change(
            lambda event, session: queue.put_nowait((event, session))
        )
        try:
            while True:
                yield await queue.get()
        finally:
            registration.remove()

    # Sign up / sign in

    async def sign_up(
        self,
        *,
        password: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        redirect_to: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> AuthResponse:
        """Create a new user with an email or a phone number.

        A session is returned (and stored) only when the server does not
        require confirmation.
        """
        _require_email_or_phone(email, phone)
        query: Dict[str, Optional[str]] = {}
        pkce: Dict[str, str] = {}
        if email is not None:
            query["redirect_to"] = redirect_to
            pkce = await asyncio.to_thread(self._prepare_for_pkce)

        request = Request(
            "/signup",
            method="POST",
            query=query,
            body=_body(
                email=email,
                phone=phone,
                password=password,
                data=data,
                gotrue_meta_security=_meta_security(captcha_token),
                **pkce,
            ),
        )

        await self._session_manager.remove()
        response = (await self._api.execute(request)).decoded(AuthResponse)
        if response.session is not None:
            await self._save_and_emit(response.session, AuthChangeEvent.SIGNED_IN)
        return response

    async def sign_in_with_password(
        self,
        *,
        password: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> Session:
        """Log in an existing user with an email or phone and a password."""
        _require_email_or_phone(email, phone)
        return await self._sign_in(
            Request(
                "/token",
                method="POST",
                query={"grant_type": "password"},
                body=_body(
                    email=email,
                    phone=phone,
                    password=password,
                    gotrue_meta_security=_meta_security(captcha_token),
                ),
            )
        )

    async def sign_in_with_id_token(self, credentials: OpenIDConnectCredentials) -> Session:
        """Log in with an ID token issued by a supported provider."""
        return await self._sign_in(
            Request(
                "/token",
                method="POST",
                query={"grant_type": "id_token"},
                body=credentials.to_body(),
            )
        )

    async def sign_in_anonymously(
        self,
        data: Optional[Dict[str, Any]] = None,
        captcha_token: Optional[str] = None,
    ) -> Session:
        """Create and sign in an anonymous user."""
        return await self._sign_in(
            Request(
                "/signup",
                method="POST",
                body=_body(data=data, gotrue_meta_security=_meta_security(captcha_token)),
            )
        )

    async def _sign_in(self, request: Request) -> Session:
        await self._session_manager.remove()
        session = (await self._api.execute(request)).decoded(Session)
        await self._save_and_emit(session, AuthChangeEvent.SIGNED_IN)
        return session

    async def sign_in_with_otp(
        self,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        redirect_to: Optional[str] = None,
        should_create_user: bool = True,
        data: Optional[Dict[str, Any]] = None,
        channel: MessagingChannel = MessagingChannel.SMS,
        captcha_token: Optional[str] = None,
    ) -> None:
        """Send a magic link or one-time password.

        The user signs in later through verify_otp or a redirect URL.
        """
        _require_email_or_phone(email, phone)
        await self._session_manager.remove()

        query: Dict[str, Optional[str]] = {}
        if email is not None:
            query["redirect_to"] = redirect_to
            pkce = await asyncio.to_thread(self._prepare_for_pkce)
            body = _body(email=email, **pkce)
        else:
            body = _body(phone=phone, channel=MessagingChannel(channel).value)

        body.update(
            _body(
                create_user=should_create_user,
                data=data,
                gotrue_meta_security=_meta_security(captcha_token),
            )
        )
        await self._api.execute(Request("/otp", method="POST", query=query, body=body))

    async def sign_in_with_sso(
        self,
        *,
        domain: Optional[str] = None,
        provider_id: Optional[str] = None,
        redirect_to: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> SSOResponse:
        """Start single sign-on with an enterprise identity provider.

        Returns:
            URL to open to continue the provider's authentication flow
        """
        if (domain is None) == (provider_id is None):
            raise ValueError("You must provide either a domain or a provider_id")

        await self._session_manager.remove()
        pkce = await asyncio.to_thread(self._prepare_for_pkce)
        response = await self._api.execute(
            Request(
                "/sso",
                method="POST",
                body=_body(
                    domain=domain,
                    provider_id=provider_id,
                    redirect_to=redirect_to,
                    gotrue_meta_security=_meta_security(captcha_token),
                    **pkce,
                ),
            )
        )
        return response.decoded(SSOResponse)

    def get_oauth_sign_in_url(
        self,
        provider: Union[Provider, str],
        scopes: Optional[str] = None,
        redirect_to: Optional[str] = None,
        query_params: Optional[Dict[str, Optional[str]]] = None,
    ) -> str:
        """Build the URL that starts a third-party OAuth sign-in.

        Starts a new PKCE flow when the client uses the pkce flow type.
        """
        return self._get_url_for_provider("/authorize", provider, scopes, redirect_to, query_params)

    async def exchange_code_for_session(self, auth_code: str) -> Session:
        """Complete a PKCE flow by exchanging the auth code for a session.

        Raises:
            CodeVerifierNotFound: When no flow is pending
        """
        verifier = await asyncio.to_thread(self._code_verifiers.require)
        response = await self._api.execute(
            Request(
                "/token",
                method="POST",
                query={"grant_type": "pkce"},
                body={"auth_code": auth_code, "code_verifier": verifier},
            )
        )
        session = response.decoded(Session)
        await asyncio.to_thread(self._code_verifiers.clear)
        await self._save_and_emit(session, AuthChangeEvent.SIGNED_IN)
        return session

    async def session_from_url(self, url: str) -> Session:
        """Establish the session carried by an OAuth redirect URL.

        Handles both the implicit grant (tokens in the URL) and the PKCE flow
        (auth code in the URL).

        Raises:
            InvalidImplicitGrantFlowURL: When the URL is not an implicit grant redirect
            InvalidPKCEFlowURL: When the URL is not a PKCE redirect
            APIError: When the redirect carries an error_description
        """
        params = extract_url_params(url)
        verifier = await asyncio.to_thread(self._code_verifiers.get)
        is_implicit = "access_token" in params or "error_description" in params
        is_pkce = "code" in params and verifier is not None

        if self.settings.flow_type == AuthFlowType.IMPLICIT and not is_implicit:
            raise InvalidImplicitGrantFlowURL()
        if self.settings.flow_type == AuthFlowType.PKCE and not is_pkce:
            raise InvalidPKCEFlowURL()

        if is_pkce:
            return await self.exchange_code_for_session(params["code"])

        if "error_description" in params:
            raise APIError(
                params["error_description"],
                code=params.get("error_code") or params.get("error"),
            )

        access_token = params.get("access_token")
        expires_in = _parse_number(params.get("expires_in"))
        refresh_token = params.get("refresh_token")
        token_type = params.get("token_type")
        if not access_token or expires_in is None or not refresh_token or not token_type:
            raise InvalidImplicitGrantFlowURL()

        user = (
            await self._api.execute(
                Request("/user", headers={"Authorization": f"{token_type} {access_token}"})
            )
        ).decoded(User)

        expires_at = _parse_number(params.get("expires_at"))
        session = Session(
            access_token=access_token,
            token_type=token_type,
            expires_in=int(expires_in),
            expires_at=int(expires_at) if expires_at is not None else None,
            refresh_token=refresh_token,
            provider_token=params.get("provider_token"),
            provider_refresh_token=params.get("provider_refresh_token"),
            user=user,
        )
        await self._save_and_emit(session, AuthChangeEvent.SIGNED_IN)

        if params.get("type") == "recovery":
            self._event_emitter.emit(AuthChangeEvent.PASSWORD_RECOVERY, session)

        return session

    # Session

    async def get_session(self) -> Session:
        """Return the current session, refreshing it first when expired.

        Concurrent callers share a single refresh.

        Raises:
            SessionNotFound: When nobody is signed in
        """
        return await self._session_manager.session()

    async def set_session(self, access_token: str, refresh_token: str) -> Session:
        """Adopt tokens obtained elsewhere as the current session.

        The access token is decoded locally without verifying its signature.
        When it is already expired the refresh token is used to obtain a new
        session instead.

        Args:
            access_token: Access token JWT
            refresh_token: Matching refresh token

        Returns:
            The stored session

        Raises:
            MissingExpClaim: When the access token carries no exp claim
        """
        exp = read_exp_claim(access_token)
        now = time.time()
        if exp <= now:
            logger.info("Access token passed to set_session is expired, refreshing")
            return await self.refresh_session(refresh_token)

        session = Session(
            access_token=access_token,
            token_type="bearer",
            expires_in=int(exp - now),
            expires_at=exp,
            refresh_token=refresh_token,
            user=User.from_claims(decode_jwt_claims(access_token)),
        )
        await self._save_and_emit(session, AuthChangeEvent.SIGNED_IN)
        return session

    async def refresh_session(self, refresh_token: Optional[str] = None) -> Session:
        """Refresh the session regardless of its expiry.

        Args:
            refresh_token: Token to use; the stored session's one when omitted

        Raises:
            SessionNotFound: When no token is given and nobody is signed in
        """
        if refresh_token is None:
            current = await self._session_manager.session(validate_expiration=False)
            refresh_token = current.refresh_token
        return await self._refresh_with_token(refresh_token)

    async def _refresh_with_token(self, refresh_token: str) -> Session:
        logger.debug("Refreshing session")
        try:
            response = await self._api.execute(
                Request(
                    "/token",
                    method="POST",
                    query={"grant_type": "refresh_token"},
                    body={"refresh_token": refresh_token},
                )
            )
        except (APIError, HTTPError) as e:
            if e.status in INVALID_REFRESH_STATUSES:
                logger.warning(f"Refresh token rejected with status {e.status}")
                if await self._session_manager.remove_if_refresh_token(refresh_token):
                    logger.info("Signed out locally after rejected refresh")
                    self._event_emitter.emit(AuthChangeEvent.SIGNED_OUT, None)
            raise

        session = response.decoded(Session)
        await self._save_and_emit(session, AuthChangeEvent.TOKEN_REFRESHED)
        return session

    async def sign_out(self, scope: SignOutScope = SignOutScope.GLOBAL) -> None:
        """Sign out the current user.

        An expired session is refreshed first so the server can revoke it.
        A 401 or 404 from the logout call counts as success since the session
        is already gone there. With scope others the local session is kept and
        no signedOut event is emitted.
        """
        scope = SignOutScope(scope)
        try:
            session: Optional[Session] = await self._session_manager.session()
        except SessionNotFound:
            logger.debug("Sign out without a local session, skipping remote logout")
            session = None
        except (APIError, HTTPError) as e:
            if e.status not in INVALID_REFRESH_STATUSES:
                raise
            # The rejected refresh already cleared the session and emitted signedOut.
            logger.info(f"Refresh before sign out answered {e.status}, treating as signed out")
            return

        if session is not None:
            try:
                await self._api.execute(
                    Request(
                        "/logout",
                        method="POST",
                        query={"scope": scope.value},
                        headers={"Authorization": session.authorization_header},
                    )
                )
            except (APIError, HTTPError) as e:
                if e.status not in SIGN_OUT_IGNORED_STATUSES:
                    raise
                logger.info(f"Remote logout answered {e.status}, treating as signed out")

        if scope != SignOutScope.OTHERS:
            await self._session_manager.remove()
            self._event_emitter.emit(AuthChangeEvent.SIGNED_OUT, None)

    # OTP

    async def verify_otp(
        self,
        *,
        token: str,
        type: Union[EmailOTPType, MobileOTPType, str],
        email: Optional[str] = None,
        phone: Optional[str] = None,
        redirect_to: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> AuthResponse:
        """Log in with a one-time password received by email or phone.

        The current session is kept for email_change and phone_change
        verifications and cleared otherwise.
        """
        _require_email_or_phone(email, phone)
        query: Dict[str, Optional[str]] = {}
        if email is not None:
            otp_type = EmailOTPType(type).value
            keep_session = otp_type == EmailOTPType.EMAIL_CHANGE.value
            query["redirect_to"] = redirect_to
        else:
            otp_type = MobileOTPType(type).value
            keep_session = otp_type == MobileOTPType.PHONE_CHANGE.value

        if not keep_session:
            await self._session_manager.remove()

        response = await self._api.execute(
            Request(
                "/verify",
                method="POST",
                query=query,
                body=_body(
                    email=email,
                    phone=phone,
                    token=token,
                    type=otp_type,
                    gotrue_meta_security=_meta_security(captcha_token),
                ),
            )
        )
        auth_response = response.decoded(AuthResponse)
        if auth_response.session is not None:
            await self._save_and_emit(auth_response.session, AuthChangeEvent.SIGNED_IN)
        return auth_response

    async def resend(
        self,
        *,
        type: Union[ResendEmailType, ResendMobileType, str],
        email: Optional[str] = None,
        phone: Optional[str] = None,
        redirect_to: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> Optional[ResendMobileResponse]:
        """Resend a signup confirmation or change OTP.

        Returns:
            The provider message id for phone messages, None for email
        """
        _require_email_or_phone(email, phone)
        query: Dict[str, Optional[str]] = {}
        if email is not None:
            resend_type = ResendEmailType(type).value
            keep_session = resend_type == ResendEmailType.EMAIL_CHANGE.value
            query["redirect_to"] = redirect_to
        else:
            resend_type = ResendMobileType(type).value
            keep_session = resend_type == ResendMobileType.PHONE_CHANGE.value

        if not keep_session:
            await self._session_manager.remove()

        response = await self._api.execute(
            Request(
                "/resend",
                method="POST",
                query=query,
                body=_body(
                    email=email,
                    phone=phone,
                    type=resend_type,
                    gotrue_meta_security=_meta_security(captcha_token),
                ),
            )
        )
        if phone is not None:
            return response.decoded(ResendMobileResponse)
        return None

    async def reauthenticate(self) -> None:
        """Send a reauthentication nonce to the signed-in user."""
        await self._api.authorized_execute(Request("/reauthenticate"))

    # User

    async def get_user(self, jwt: Optional[str] = None) -> User:
        """Fetch the latest user record from the server.

        Args:
            jwt: Access token to use instead of the current session's
        """
        request = Request("/user")
        if jwt is not None:
            request.headers["Authorization"] = f"Bearer {jwt}"
            response = await self._api.execute(request)
        else:
            response = await self._api.authorized_execute(request)
        return response.decoded(User)

    async def update_user(self, attributes: UserAttributes) -> User:
        """Update the signed-in user and store the returned record.

        Changing the email starts a new PKCE flow for the confirmation link.
        """
        if attributes.email is not None:
            pkce = await asyncio.to_thread(self._prepare_for_pkce)
            if pkce:
                attributes = attributes.model_copy(update=pkce)

        session = await self._session_manager.session()
        response = await self._api.execute(
            Request(
                "/user",
                method="PUT",
                headers={"Authorization": session.authorization_header},
                body=attributes.to_body(),
            )
        )
        user = response.decoded(User)
        await self._save_and_emit(session.model_copy(update={"user": user}), AuthChangeEvent.USER_UPDATED)
        return user

    async def user_identities(self) -> List[UserIdentity]:
        """Identities linked to the signed-in user."""
        return (await self.get_user()).identities or []

    def get_link_identity_url(
        self,
        provider: Union[Provider, str],
        scopes: Optional[str] = None,
        redirect_to: Optional[str] = None,
        query_params: Optional[Dict[str, Optional[str]]] = None,
    ) -> str:
        """Build the URL that links a new OAuth identity to the signed-in user."""
        return self._get_url_for_provider(
            "/user/identities/authorize", provider, scopes, redirect_to, query_params
        )

    async def unlink_identity(self, identity: UserIdentity) -> None:
        await self._api.authorized_execute(
            Request(f"/user/identities/{identity.identity_id}", method="DELETE")
        )

    async def reset_password_for_email(
        self,
        email: str,
        redirect_to: Optional[str] = None,
        captcha_token: Optional[str] = None,
    ) -> None:
        """Send a password recovery link to an email address."""
        pkce = await asyncio.to_thread(self._prepare_for_pkce)
        await self._api.execute(
            Request(
                "/recover",
                method="POST",
                query={"redirect_to": redirect_to},
                body=_body(
                    email=email,
                    gotrue_meta_security=_meta_security(captcha_token),
                    **pkce,
                ),
            )
        )

    # Internals

    async def _save_and_emit(self, session: Session, event: AuthChangeEvent) -> None:
        await self._session_manager.update(session)
        self._event_emitter.emit(event, session)

    def _prepare_for_pkce(self) -> Dict[str, str]:
        """Start a new PKCE flow when configured. Blocking."""
        if self.settings.flow_type != AuthFlowType.PKCE:
            return {}
        verifier = generate_code_verifier()
        self._code_verifiers.set(verifier)
        challenge = generate_code_challenge(verifier)
        return PKCEParams(challenge, code_challenge_method(verifier, challenge)).as_body()

    def _get_url_for_provider(
        self,
        path: str,
        provider: Union[Provider, str],
        scopes: Optional[str],
        redirect_to: Optional[str],
        query_params: Optional[Dict[str, Optional[str]]],
    ) -> str:
        params: List[Tuple[str, str]] = [("provider", getattr(provider, "value", provider))]
        if scopes is not None:
            params.append(("scopes", scopes))
        if redirect_to is not None:
            params.append(("redirect_to", redirect_to))
        params.extend(self._prepare_for_pkce().items())
        for name, value in (query_params or {}).items():
            if value is not None:
                params.append((name, value))
        return f"{self.settings.url}{path}?{urlencode(params)}"
