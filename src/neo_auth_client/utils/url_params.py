"""Callback URL parameter helpers."""

from typing import Dict
from urllib.parse import parse_qsl, urlsplit


def extract_url_params(url: str) -> Dict[str, str]:
    """Collect parameters from both the query string and the fragment.

    Implicit grant redirects put tokens in the fragment while PKCE redirects
    use the query string. Fragment values win on conflicts.

    Args:
        url: Redirect URL received by the application

    Returns:
        Mapping of parameter name to first value
    """
    parts = urlsplit(url)
    params: Dict[str, str] = {}
    for name, value in parse_qsl(parts.query, keep_blank_values=True):
        params.setdefault(name, value)
    fragment: Dict[str, str] = {}
    for name, value in parse_qsl(parts.fragment, keep_blank_values=True):
        fragment.setdefault(name, value)
    params.update(fragment)
    return params
