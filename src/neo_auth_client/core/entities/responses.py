"""Operation specific response payloads."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .session import Session
from .user import User


class AuthResponse(BaseModel):
    """Response of sign-up and OTP verification.

    The server answers either with a full session (flattened into the top
    level object) or with a bare user when confirmation is still pending.
    """

    model_config = ConfigDict(frozen=True)

    session: Optional[Session] = None
    user: Optional[User] = None

    @model_validator(mode="before")
    @classmethod
    def _split_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "access_token" in data:
            session = Session.model_validate(data)
            return {"session": session, "user": session.user}
        if "session" in data or "user" in data:
            return data
        if "id" in data:
            return {"user": data}
        return data


class SSOResponse(BaseModel):
    """URL to open in order to continue an SSO sign-in."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    url: str


class ResendMobileResponse(BaseModel):
    """Result of resending a mobile OTP."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    message_id: Optional[str] = None
