"""Request parameter models sent to the auth server."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class OpenIDConnectCredentials(BaseModel):
    """ID token issued by a supported third-party provider."""

    provider: str = Field(..., description="Provider that issued the ID token (google, apple, ...)")
    id_token: str = Field(..., min_length=1, description="OIDC ID token")
    access_token: Optional[str] = Field(
        default=None,
        description="Provider access token, required when the ID token has an at_hash claim"
    )
    nonce: Optional[str] = Field(default=None, description="Nonce used when requesting the ID token")
    captcha_token: Optional[str] = Field(default=None, exclude=True)

    def to_body(self) -> Dict[str, Any]:
        """Build the JSON body for the id_token grant."""
        body = self.model_dump(exclude_none=True)
        if self.captcha_token:
            body["gotrue_meta_security"] = {"captcha_token": self.captcha_token}
        return body


class UserAttributes(BaseModel):
    """Mutable attributes of the signed-in user."""

    model_config = ConfigDict(extra="forbid")

    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=1)
    nonce: Optional[str] = Field(default=None, description="Reauthentication nonce for password changes")
    data: Optional[Dict[str, Any]] = Field(default=None, description="User metadata")
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        """Build the JSON body for PUT /user."""
        return self.model_dump(exclude_none=True)
