"""Constants shared across neo-auth-client."""

from ..__version__ import __version__

# Stored sessions are treated as expired this many seconds before their
# expiration date so that refresh happens ahead of the real expiry.
EXPIRY_MARGIN_SECONDS = 60

DEFAULT_STORAGE_KEY = "neo.auth.session"
CODE_VERIFIER_KEY_SUFFIX = "-code-verifier"

DEFAULT_TIMEOUT_SECONDS = 10.0

DEFAULT_HEADERS = {
    "X-Client-Info": f"neo-auth-client/{__version__}",
}

# Remote logout answers that mean the session is already gone.
SIGN_OUT_IGNORED_STATUSES = frozenset({401, 404})

# Refresh answers that mean the refresh token itself was rejected.
INVALID_REFRESH_STATUSES = frozenset({400, 401})
