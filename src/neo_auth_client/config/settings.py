"""Auth client settings.

One settings object is built per client and handed to every component at
construction time. Values can come from keyword arguments or from
``NEO_AUTH_*`` environment variables.
"""

from typing import Dict, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.value_objects import AuthFlowType
from .constants import (
    CODE_VERIFIER_KEY_SUFFIX,
    DEFAULT_HEADERS,
    DEFAULT_STORAGE_KEY,
    DEFAULT_TIMEOUT_SECONDS,
)


class AuthClientSettings(BaseSettings):
    """Configuration for an AuthClient instance."""

    model_config = SettingsConfigDict(
        env_prefix="NEO_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(..., description="Base URL of the auth server, e.g. https://host/auth/v1")
    api_key: Optional[SecretStr] = Field(default=None, description="Project API key sent as apikey header")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra headers for every request")
    flow_type: AuthFlowType = Field(default=AuthFlowType.PKCE)
    storage_key: str = Field(default=DEFAULT_STORAGE_KEY, min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL."""
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("Auth URL must start with http:// or https://")
        return value.rstrip("/")

    @property
    def code_verifier_key(self) -> str:
        """Storage key of the pending PKCE verifier."""
        return f"{self.storage_key}{CODE_VERIFIER_KEY_SUFFIX}"

    def request_headers(self) -> Dict[str, str]:
        """Headers sent with every request; caller supplied ones win."""
        headers = dict(DEFAULT_HEADERS)
        if self.api_key is not None:
            headers["apikey"] = self.api_key.get_secret_value()
        headers.update(self.headers)
        return headers
