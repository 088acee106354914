"""Authentication session entity."""

import time
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .user import User


class Session(BaseModel):
    """Credential issued by the auth server.

    Handles ONLY the credential representation. Sessions are immutable: every
    update produces a new instance, usually through ``model_copy(update=...)``.

    ``expires_at`` is authoritative and always populated. When the server
    omits it, it is derived from ``expires_in`` at construction.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str = Field(..., min_length=1)
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Lifetime of the access token in seconds")
    expires_at: int = Field(..., description="Absolute expiry as epoch seconds")
    refresh_token: str
    provider_token: Optional[str] = None
    provider_refresh_token: Optional[str] = None
    user: User

    @model_validator(mode="before")
    @classmethod
    def _populate_expires_at(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("expires_at") is None:
            expires_in = data.get("expires_in")
            if expires_in is not None:
                data = {**data, "expires_at": round(time.time() + float(expires_in))}
        return data

    @property
    def authorization_header(self) -> str:
        """Value for the Authorization header of authenticated requests."""
        return f"Bearer {self.access_token}"

    def mask_for_logging(self) -> str:
        """Return masked access token safe for logging."""
        if len(self.access_token) <= 20:
            return "***"
        return f"{self.access_token[:8]}...{self.access_token[-8:]}"

    def __repr__(self) -> str:
        return (
            f"Session(access_token={self.mask_for_logging()}, user_id={self.user.id}, "
            f"expires_at={self.expires_at})"
        )
