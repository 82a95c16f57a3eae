"""Spotify currently-playing reads with refresh and rate-limit recovery."""

import asyncio
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from now_playing_overlay.exceptions import (
    AccessTokenRejectedException,
    RateLimitedException,
    RetriesExhaustedException,
    UpstreamAuthException,
    UpstreamException,
    UpstreamUnavailableException,
)
from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.models import PlaybackSnapshot
from now_playing_overlay.protocols import TokenProviderProtocol

logger = get_logger(__name__)

SPOTIFY_CURRENTLY_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"
DEFAULT_RETRY_AFTER_SECONDS = 1.0

SleepFunc = Callable[[float], Awaitable[Any]]


def parse_retry_after(headers: Mapping[str, str]) -> float:
    """Read the Retry-After header in seconds, defaulting to 1 when absent, unparsable or not finite."""
    value = headers.get("retry-after")
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_RETRY_AFTER_SECONDS
    return seconds


def parse_snapshot(data: dict[str, Any]) -> PlaybackSnapshot | None:
    """Map a currently-playing payload to a snapshot.

    Args:
        data: Decoded JSON body from the currently-playing endpoint

    Returns:
        PlaybackSnapshot, or None when no item is playing

    Raises:
        UpstreamUnavailableException: If the item cannot be mapped to a complete snapshot
    """
    item = data.get("item")
    if not item:
        return None

    try:
        artists = item.get("artists") or []
        images = (item.get("album") or {}).get("images") or []
        return PlaybackSnapshot(
            title=item["name"],
            artist=", ".join(artist["name"] for artist in artists),
            album_art=images[0].get("url") if images else None,
            duration_ms=item["duration_ms"],
            progress_ms=data.get("progress_ms") or 0,
            is_playing=bool(data.get("is_playing", False)),
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise UpstreamUnavailableException(
            "Malformed currently-playing payload",
            details={"error": str(e)[:200]},
        ) from e


class PlaybackPoller:
    """Fetches the currently playing item.

    Recovery is an explicit bounded loop: a 401 triggers one token refresh, a
    429 waits for Retry-After, and each of them consumes one of
    ``max_attempts`` reads.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        tokens: TokenProviderProtocol,
        max_attempts: int = 3,
        sleep: SleepFunc = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._client = client
        self._tokens = tokens
        self._max_attempts = max_attempts
        self._sleep = sleep

    async def fetch_current(self) -> PlaybackSnapshot | None:
        """Get the currently playing track.

        Returns:
            PlaybackSnapshot, or None if nothing is playing or the read failed
        """
        try:
            return await self.fetch_with_retry()
        except UpstreamException as e:
            log_with_context(
                logger,
                "error",
                "Error fetching currently playing track",
                error=e.message,
                error_code=e.code.value,
                details=e.details,
                event_type="playback_fetch_failed",
            )
            return None

    async def fetch_with_retry(self) -> PlaybackSnapshot | None:
        """Get the currently playing track, raising once recovery gives up.

        Raises:
            UpstreamAuthException: If no usable access token can be obtained
            UpstreamUnavailableException: On network errors, unexpected statuses or malformed payloads
            RetriesExhaustedException: If every attempt hit 401 or 429
        """
        if not await self._tokens.get_token():
            await self._tokens.refresh()

        last_error: UpstreamException | None = None
        for attempt in range(1, self._max_attempts + 1):
            token = await self._tokens.get_token()
            if not token:
                raise UpstreamAuthException("No usable access token")

            try:
                return await self._read_currently_playing(token)
            except AccessTokenRejectedException as e:
                last_error = e
                log_with_context(
                    logger,
                    "info",
                    "Access token rejected, refreshing",
                    attempt=attempt,
                    event_type="playback_token_rejected",
                )
                if attempt < self._max_attempts and not await self._tokens.refresh():
                    raise UpstreamAuthException("No usable access token") from e
            except RateLimitedException as e:
                last_error = e
                log_with_context(
                    logger,
                    "warning",
                    f"Rate limited. Retrying after {e.retry_after * 1000:.0f} ms",
                    attempt=attempt,
                    retry_after=e.retry_after,
                    event_type="playback_rate_limited",
                )
                if attempt < self._max_attempts:
                    await self._sleep(e.retry_after)

        raise RetriesExhaustedException(self._max_attempts, last_error)

    async def _read_currently_playing(self, token: str) -> PlaybackSnapshot | None:
        try:
            response = await self._client.get(
                SPOTIFY_CURRENTLY_PLAYING_URL,
                headers={"Authorization": f"Bearer {token}"},
                timeout=10.0,
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableException(f"Spotify request failed: {e}") from e

        if response.status_code == 401:
            raise AccessTokenRejectedException()
        if response.status_code == 429:
            raise RateLimitedException(parse_retry_after(response.headers))
        if response.is_error:
            raise UpstreamUnavailableException(
                f"Spotify returned {response.status_code}",
                details={"status_code": response.status_code, "response": response.text[:200]},
            )
        if response.status_code == 204 or not response.content:
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailableException("Spotify returned invalid JSON") from e
        if not isinstance(data, dict):
            raise UpstreamUnavailableException("Spotify returned an unexpected payload")

        return parse_snapshot(data)
