"""Background poll loop driving the playback poller."""

import asyncio
import contextlib
from enum import Enum

from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.services.playback_service import PlaybackPoller, SleepFunc
from now_playing_overlay.state_managers import CredentialManager, PlaybackStateManager

logger = get_logger(__name__)


class PollState(str, Enum):
    """Lifecycle of the poll loop."""

    IDLE = "idle"
    POLLING = "polling"
    SETUP_REQUIRED = "setup_required"
    STOPPED = "stopped"


class PollLoop:
    """Calls the poller on a fixed interval and stores each result.

    A failed cycle stores None and the loop carries on; it only ends when
    stop() cancels it.
    """

    def __init__(
        self,
        poller: PlaybackPoller,
        playback_state: PlaybackStateManager,
        credentials: CredentialManager,
        interval_seconds: float,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self._poller = poller
        self._playback_state = playback_state
        self._credentials = credentials
        self._interval_seconds = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._state = PollState.IDLE

    @property
    def state(self) -> PollState:
        return self._state

    async def start(self) -> PollState:
        """Start polling if a refresh token is configured.

        Returns:
            The state after startup: POLLING or SETUP_REQUIRED
        """
        if self._state is not PollState.IDLE:
            return self._state

        if not self._credentials.has_refresh_token:
            self._state = PollState.SETUP_REQUIRED
            log_with_context(
                logger,
                "warning",
                "SETUP REQUIRED: no REFRESH_TOKEN configured. Visit /setup in your browser, "
                "authorize with Spotify, add the refresh token to your .env file (REFRESH_TOKEN=...) "
                "and restart the server.",
                event_type="poll_setup_required",
            )
            return self._state

        self._state = PollState.POLLING
        self._task = asyncio.create_task(self.run(), name="spotify-poll-loop")
        log_with_context(
            logger,
            "info",
            "Poll loop started",
            interval_seconds=self._interval_seconds,
            event_type="poll_started",
        )
        return self._state

    async def run(self) -> None:
        """Poll forever: fetch, store, wait."""
        while True:
            await self.poll_once()
            await self._sleep(self._interval_seconds)

    async def poll_once(self) -> None:
        """Run one poll cycle and store its result."""
        try:
            snapshot = await self._poller.fetch_current()
        except Exception as e:
            log_with_context(
                logger,
                "error",
                "Unexpected error in poll cycle",
                error=str(e),
                error_type=type(e).__name__,
                event_type="poll_cycle_error",
            )
            logger.debug("Poll cycle traceback:", exc_info=True)
            snapshot = None

        await self._playback_state.set_snapshot(snapshot)

    async def stop(self) -> None:
        """Cancel the background task; in-flight upstream calls are abandoned."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._state is PollState.POLLING:
            self._state = PollState.STOPPED
            log_with_context(logger, "info", "Poll loop stopped", event_type="poll_stopped")
