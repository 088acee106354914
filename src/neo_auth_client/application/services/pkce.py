"""PKCE code verifier and challenge helpers (RFC 7636)."""

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass

logger = logging.getLogger(__name__)

VERIFIER_BYTES = 64


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_code_verifier() -> str:
    """Return a fresh high-entropy verifier, URL-safe base64 without padding."""
    return _base64url(secrets.token_bytes(VERIFIER_BYTES))


def generate_code_challenge(verifier: str) -> str:
    """Derive the challenge sent to the server.

    Returns the SHA-256 digest of the verifier, URL-safe base64 encoded
    without padding. When SHA-256 is not available on this interpreter the
    verifier itself is returned and the flow degrades to the plain method.
    """
    try:
        digest = hashlib.new("sha256")
    except ValueError:
        logger.warning("SHA-256 unavailable, falling back to plain PKCE challenge")
        return verifier
    digest.update(verifier.encode("utf-8"))
    return _base64url(digest.digest())


def code_challenge_method(verifier: str, challenge: str) -> str:
    return "plain" if verifier == challenge else "s256"


@dataclass(frozen=True)
class PKCEParams:
    """Challenge pair attached to a redirect based request."""

    code_challenge: str
    code_challenge_method: str

    def as_body(self) -> dict:
        return {
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
        }
