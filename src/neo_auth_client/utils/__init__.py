"""Utility helpers."""

from .jwt_claims import decode_jwt_claims, read_exp_claim
from .url_params import extract_url_params

__all__ = [
    "decode_jwt_claims",
    "read_exp_claim",
    "extract_url_params",
]
