"""State managers for the process-local mutable state.

Credential and snapshot state live here rather than in module globals; the
overlay service owns one instance of each. Access is serialised with
asyncio.Lock. All state managers inherit from StateManager ABC.
"""

import asyncio
import time
from abc import ABC, abstractmethod

from now_playing_overlay.models import PlaybackSnapshot


class StateManager(ABC):
    """Base class for all state managers.

    All subclasses must implement the lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


class CredentialManager(StateManager):
    """Holds the Spotify refresh token and the current access token.

    Only the token manager writes here. An access token past its expiry
    reads as absent so the poller refreshes before using it.
    """

    def __init__(self, refresh_token: str = ""):
        self._refresh_token = refresh_token
        self._access_token: str | None = None
        self._token_expires_at: float = 0
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def cleanup(self) -> None:
        """Drop the access token on shutdown."""
        async with self._lock:
            self._access_token = None
            self._token_expires_at = 0

    @property
    def refresh_token(self) -> str:
        return self._refresh_token

    @property
    def has_refresh_token(self) -> bool:
        return bool(self._refresh_token)

    async def get_token(self) -> str | None:
        """Get the current access token if available and not expired.

        Returns:
            Access token string or None if expired/not set
        """
        async with self._lock:
            if self._access_token and self._token_expires_at > time.time():
                return self._access_token
            return None

    async def set_token(self, token: str, expires_in: int | None = None) -> None:
        """Set a new access token.

        Args:
            token: The access token string
            expires_in: Lifetime in seconds; tokens without one never expire locally
        """
        async with self._lock:
            self._access_token = token
            self._token_expires_at = time.time() + expires_in if expires_in is not None else float("inf")

    async def set_refresh_token(self, refresh_token: str) -> None:
        """Replace the refresh token in memory (Spotify may rotate it on refresh)."""
        async with self._lock:
            self._refresh_token = refresh_token


class PlaybackStateManager(StateManager):
    """Holds the latest playback snapshot.

    Each poll cycle overwrites the previous value; no history is kept.
    """

    def __init__(self):
        self._snapshot: PlaybackSnapshot | None = None
        self._updated_at: float | None = None
        self._cycle_count: int = 0
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        pass

    async def cleanup(self) -> None:
        async with self._lock:
            self._snapshot = None

    async def get_snapshot(self) -> PlaybackSnapshot | None:
        """Get the latest snapshot, or None when nothing is playing or the last cycle failed."""
        async with self._lock:
            return self._snapshot

    async def set_snapshot(self, snapshot: PlaybackSnapshot | None) -> None:
        """Store the result of a poll cycle."""
        async with self._lock:
            self._snapshot = snapshot
            self._updated_at = time.time()
            self._cycle_count += 1

    async def get_updated_at(self) -> float | None:
        async with self._lock:
            return self._updated_at

    async def get_cycle_count(self) -> int:
        async with self._lock:
            return self._cycle_count
