"""Adapters for external systems."""

from .api_client import APIClient, Request, Response, parse_error

__all__ = [
    "APIClient",
    "Request",
    "Response",
    "parse_error",
]
