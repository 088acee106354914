"""Auth state change event kinds."""

from enum import Enum


class AuthChangeEvent(str, Enum):
    """Session change notifications delivered to auth state listeners."""

    INITIAL_SESSION = "initialSession"
    SIGNED_IN = "signedIn"
    SIGNED_OUT = "signedOut"
    TOKEN_REFRESHED = "tokenRefreshed"
    USER_UPDATED = "userUpdated"
    PASSWORD_RECOVERY = "passwordRecovery"
