"""Value objects for the auth client."""

from .auth_change_event import AuthChangeEvent
from .enums import (
    AuthFlowType,
    SignOutScope,
    MessagingChannel,
    EmailOTPType,
    MobileOTPType,
    ResendEmailType,
    ResendMobileType,
    Provider,
)
from .credentials import OpenIDConnectCredentials, UserAttributes

__all__ = [
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
]
