"""Unverified JWT claim decoding."""

import logging
from typing import Any, Dict

import jwt

from ..core.exceptions import MissingExpClaim

logger = logging.getLogger(__name__)


def decode_jwt_claims(token: str) -> Dict[str, Any]:
    """Decode a JWT payload without verifying its signature.

    The auth server is the only party that verifies tokens; the client reads
    claims such as exp for scheduling only.

    Args:
        token: Encoded JWT

    Returns:
        Claims dictionary

    Raises:
        jwt.DecodeError: When the token is not a decodable JWT
    """
    return jwt.decode(
        token,
        options={
            "verify_signature": False,
            "verify_exp": False,
            "verify_aud": False,
        },
    )


def read_exp_claim(token: str) -> int:
    """Return the exp claim of a token as epoch seconds.

    Raises:
        MissingExpClaim: When the token cannot be decoded or carries no exp
    """
    try:
        claims = decode_jwt_claims(token)
    except jwt.PyJWTError as e:
        logger.debug(f"Access token could not be decoded: {e}")
        raise MissingExpClaim("Access token is not a decodable JWT") from e

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        raise MissingExpClaim()
    return int(exp)
