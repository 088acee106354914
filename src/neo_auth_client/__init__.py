"""Neo-Auth-Client - async auth session lifecycle manager for NeoMultiTenant services.

Holds the locally cached auth session, refreshes it exactly once under
concurrent demand, persists it, and broadcasts session changes to listeners.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import AuthClientSettings, LoggingConfig

from .core.exceptions import (
    NeoAuthError,
    SessionNotFound,
    PKCEError,
    CodeVerifierNotFound,
    InvalidPKCEFlowURL,
    InvalidImplicitGrantFlowURL,
    MissingExpClaim,
    APIError,
    HTTPError,
    StorageError,
    create_error_response,
)

from .core.value_objects import (
    AuthChangeEvent,
    AuthFlowType,
    SignOutScope,
    MessagingChannel,
    EmailOTPType,
    MobileOTPType,
    ResendEmailType,
    ResendMobileType,
    Provider,
    OpenIDConnectCredentials,
    UserAttributes,
)

from .core.entities import (
    Session,
    StoredSession,
    User,
    UserIdentity,
    Factor,
    AuthResponse,
    SSOResponse,
    ResendMobileResponse,
)

from .core.protocols import AuthLocalStorage, SessionRefresher

from .infrastructure.repositories import (
    MemoryLocalStorage,
    FileLocalStorage,
    RedisLocalStorage,
)

from .application import (
    AuthClient,
    EventEmitter,
    ListenerRegistration,
    SessionManager,
)

__all__ = [
    "__version__",

    # Configuration
    "AuthClientSettings",
    "LoggingConfig",

    # Exceptions
    "NeoAuthError",
    "SessionNotFound",
    "PKCEError",
    "CodeVerifierNotFound",
    "InvalidPKCEFlowURL",
    "InvalidImplicitGrantFlowURL",
    "MissingExpClaim",
    "APIError",
    "HTTPError",
    "StorageError",
    "create_error_response",

    # Value Objects
    "AuthChangeEvent",
    "AuthFlowType",
    "SignOutScope",
    "MessagingChannel",
    "EmailOTPType",
    "MobileOTPType",
    "ResendEmailType",
    "ResendMobileType",
    "Provider",
    "OpenIDConnectCredentials",
    "UserAttributes",

    # Entities
    "Session",
    "StoredSession",
    "User",
    "UserIdentity",
    "Factor",
    "AuthResponse",
    "SSOResponse",
    "ResendMobileResponse",

    # Storage
    "AuthLocalStorage",
    "SessionRefresher",
    "MemoryLocalStorage",
    "FileLocalStorage",
    "RedisLocalStorage",

    # Client
    "AuthClient",
    "EventEmitter",
    "ListenerRegistration",
    "SessionManager",
]
