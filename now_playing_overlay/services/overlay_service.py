"""Service object owning the overlay's runtime state."""

import asyncio

import httpx

from now_playing_overlay.config import Settings
from now_playing_overlay.models import PlaybackSnapshot
from now_playing_overlay.protocols import TokenProviderProtocol
from now_playing_overlay.services.playback_service import PlaybackPoller, SleepFunc
from now_playing_overlay.services.poll_loop import PollLoop, PollState
from now_playing_overlay.services.token_service import TokenManager
from now_playing_overlay.state_managers import CredentialManager, PlaybackStateManager, StateManager


class OverlayService(StateManager):
    """Credential state, latest snapshot, token manager, poller and poll loop.

    One instance lives on ``app.state.overlay_service``. Request handlers only
    read from it; the poll loop is the only writer.

    Args:
        settings: Application settings
        client: Shared HTTP client
        token_provider: Replaces the TokenManager (tests)
        sleep: Replaces asyncio.sleep for rate-limit waits and the poll interval (tests)
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        token_provider: TokenProviderProtocol | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.settings = settings
        self.credentials = CredentialManager(settings.refresh_token)
        self.playback_state = PlaybackStateManager()
        self.token_provider: TokenProviderProtocol = token_provider or TokenManager(
            client, settings, self.credentials
        )
        self.poller = PlaybackPoller(
            client,
            self.token_provider,
            max_attempts=settings.max_fetch_attempts,
            sleep=sleep,
        )
        self.poll_loop = PollLoop(
            self.poller,
            self.playback_state,
            self.credentials,
            interval_seconds=settings.poll_interval_seconds,
            sleep=sleep,
        )

    async def initialize(self) -> None:
        """Initialize state and start polling (if a refresh token is configured)."""
        await self.credentials.initialize()
        await self.playback_state.initialize()
        await self.poll_loop.start()

    async def cleanup(self) -> None:
        await self.poll_loop.stop()
        await self.playback_state.cleanup()
        await self.credentials.cleanup()

    @property
    def poll_state(self) -> PollState:
        return self.poll_loop.state

    async def current_snapshot(self) -> PlaybackSnapshot | None:
        return await self.playback_state.get_snapshot()
