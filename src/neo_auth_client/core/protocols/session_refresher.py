"""Session refresher protocol contract."""

from typing import Protocol, runtime_checkable

from ..entities import Session


@runtime_checkable
class SessionRefresher(Protocol):
    """Protocol for exchanging a refresh token for a new session.

    Implementations perform the remote call, persist the new session through
    SessionManager.update and emit the matching notification before returning.
    """

    async def __call__(self, refresh_token: str) -> Session:
        """Refresh and return the new session.

        Args:
            refresh_token: Refresh token of the expired session

        Returns:
            Newly issued session

        Raises:
            APIError: When the server rejects the refresh token
            HTTPError: When the server fails without a structured error
        """
        ...
