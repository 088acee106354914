"""Enumerations shared by the auth client operations."""

from enum import Enum


class AuthFlowType(str, Enum):
    """OAuth flow used for redirect based sign-ins."""
    IMPLICIT = "implicit"
    PKCE = "pkce"


class SignOutScope(str, Enum):
    """Which sessions a sign-out revokes."""
    GLOBAL = "global"    # every session of the user
    LOCAL = "local"      # only the current session
    OTHERS = "others"    # every session except the current one


class MessagingChannel(str, Enum):
    """Channel used to deliver phone OTPs."""
    SMS = "sms"
    WHATSAPP = "whatsapp"


class EmailOTPType(str, Enum):
    """Email OTP verification types."""
    SIGNUP = "signup"
    INVITE = "invite"
    MAGICLINK = "magiclink"
    RECOVERY = "recovery"
    EMAIL_CHANGE = "email_change"
    EMAIL = "email"


class MobileOTPType(str, Enum):
    """Mobile OTP verification types."""
    SMS = "sms"
    PHONE_CHANGE = "phone_change"


class ResendEmailType(str, Enum):
    """Email messages that can be resent."""
    SIGNUP = "signup"
    EMAIL_CHANGE = "email_change"


class ResendMobileType(str, Enum):
    """Mobile messages that can be resent."""
    SMS = "sms"
    PHONE_CHANGE = "phone_change"


class Provider(str, Enum):
    """Third-party OAuth providers supported by the auth server."""
    APPLE = "apple"
    AZURE = "azure"
    BITBUCKET = "bitbucket"
    DISCORD = "discord"
    EMAIL = "email"
    FACEBOOK = "facebook"
    FIGMA = "figma"
    GITHUB = "github"
    GITLAB = "gitlab"
    GOOGLE = "google"
    KAKAO = "kakao"
    KEYCLOAK = "keycloak"
    LINKEDIN = "linkedin"
    LINKEDIN_OIDC = "linkedin_oidc"
    NOTION = "notion"
    SLACK = "slack"
    SPOTIFY = "spotify"
    TWITCH = "twitch"
    TWITTER = "twitter"
    WORKOS = "workos"
    ZOOM = "zoom"
