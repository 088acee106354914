"""Locally persisted session wrapper."""

import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ...config.constants import EXPIRY_MARGIN_SECONDS
from .session import Session


class StoredSession(BaseModel):
    """A locally stored session plus its expiration date.

    Serialized as ``{"session": {...}, "expirationDate": <epoch seconds>}``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    session: Session
    expiration_date: float = Field(..., alias="expirationDate")

    @classmethod
    def from_session(
        cls,
        session: Session,
        expiration_date: Optional[float] = None,
    ) -> "StoredSession":
        """Wrap a session, defaulting the expiration date from the session.

        Args:
            session: Session to wrap
            expiration_date: Explicit expiration as epoch seconds

        Returns:
            Stored session record
        """
        if expiration_date is None:
            # Session guarantees expires_at, derived from expires_in when the
            # server omitted it.
            expiration_date = float(session.expires_at)
        return cls(session=session, expiration_date=expiration_date)

    def is_valid_at(self, now: float) -> bool:
        """Check validity against an explicit clock reading."""
        return self.expiration_date > now + EXPIRY_MARGIN_SECONDS

    @property
    def is_valid(self) -> bool:
        """False once now is within the expiry margin of the expiration date."""
        return self.is_valid_at(time.time())

    def to_json(self) -> bytes:
        """Encode the persisted record."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_json(cls, raw: bytes) -> "StoredSession":
        """Decode a persisted record."""
        return cls.model_validate_json(raw)
