"""User snapshot returned by the auth server."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserIdentity(BaseModel):
    """An identity (email, phone, OAuth provider) linked to a user."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    identity_id: str
    user_id: str
    provider: str
    identity_data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Factor(BaseModel):
    """An MFA factor enrolled by a user."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    friendly_name: Optional[str] = None
    factor_type: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class User(BaseModel):
    """User record embedded in every session.

    Unknown fields sent by newer servers are ignored so that an older client
    keeps decoding responses.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    aud: str = ""
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    email_confirmed_at: Optional[datetime] = None
    phone_confirmed_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    confirmation_sent_at: Optional[datetime] = None
    recovery_sent_at: Optional[datetime] = None
    email_change_sent_at: Optional[datetime] = None
    new_email: Optional[str] = None
    invited_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    action_link: Optional[str] = None
    app_metadata: Dict[str, Any] = Field(default_factory=dict)
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    identities: Optional[List[UserIdentity]] = None
    factors: Optional[List[Factor]] = None
    is_anonymous: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "User":
        """Build a user snapshot from decoded access token claims.

        Args:
            claims: Unverified JWT payload issued by the auth server

        Returns:
            User carrying the identity fields present in the token
        """
        aud = claims.get("aud") or ""
        if isinstance(aud, list):
            aud = aud[0] if aud else ""
        return cls(
            id=claims.get("sub", ""),
            aud=aud,
            role=claims.get("role"),
            email=claims.get("email") or None,
            phone=claims.get("phone") or None,
            app_metadata=claims.get("app_metadata") or {},
            user_metadata=claims.get("user_metadata") or {},
            is_anonymous=bool(claims.get("is_anonymous", False)),
        )
