"""Protocol definitions for dependency injection."""

from typing import Protocol


class TokenProviderProtocol(Protocol):
    """Source of Spotify access tokens for the playback poller.

    Implemented by TokenManager; tests inject fakes.
    """

    async def get_token(self) -> str | None:
        """Return the held access token, or None if there is no usable one."""
        ...

    async def refresh(self) -> str | None:
        """Mint a new access token.

        Returns:
            The new token, or None if the exchange failed
        """
        ...
