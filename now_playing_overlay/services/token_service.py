"""Spotify access token refresh."""

import httpx

from now_playing_overlay.config import Settings
from now_playing_overlay.exceptions import UpstreamAuthException
from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.state_managers import CredentialManager

logger = get_logger(__name__)

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


class TokenManager:
    """Exchanges the refresh token for short-lived access tokens.

    There is no retry here; the poller decides when to call refresh() again.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings, credentials: CredentialManager):
        self._client = client
        self._settings = settings
        self._credentials = credentials

    async def get_token(self) -> str | None:
        return await self._credentials.get_token()

    async def refresh(self) -> str | None:
        """Refresh the access token.

        Failures are logged and leave the held credential untouched.

        Returns:
            The new access token, or None if the exchange failed
        """
        try:
            return await self._request_access_token()
        except UpstreamAuthException as e:
            log_with_context(
                logger,
                "error",
                "Error refreshing access token",
                error=e.message,
                **e.details,
                event_type="token_refresh_failed",
            )
            return None

    async def _request_access_token(self) -> str:
        """Run the refresh_token grant against the Spotify token endpoint.

        Returns:
            Access token string

        Raises:
            UpstreamAuthException: If no refresh token is configured or the exchange fails
        """
        refresh_token = self._credentials.refresh_token
        if not refresh_token:
            raise UpstreamAuthException("No refresh token available. Visit /setup first.")

        try:
            response = await self._client.post(
                SPOTIFY_TOKEN_URL,
                auth=(self._settings.client_id, self._settings.client_secret),
                data={"grant_type": "refresh_token", "refresh_token": refresh_token},
                timeout=10.0,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamAuthException(
                "Spotify token refresh failed",
                details={"status_code": e.response.status_code, "response": e.response.text[:200]},
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamAuthException(f"Spotify token endpoint unreachable: {e}") from e
        except ValueError as e:
            raise UpstreamAuthException(f"Invalid Spotify token response: {e}") from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise UpstreamAuthException("Spotify token response missing access_token")

        expires_in = data.get("expires_in")
        if expires_in is not None:
            try:
                expires_in = int(expires_in)
            except (TypeError, ValueError) as e:
                raise UpstreamAuthException(f"Invalid expires_in in Spotify token response: {expires_in!r}") from e

        await self._credentials.set_token(access_token, expires_in)

        # Spotify may rotate the refresh token; keep it for this process only
        if data.get("refresh_token"):
            await self._credentials.set_refresh_token(data["refresh_token"])

        log_with_context(
            logger,
            "info",
            "Access token refreshed",
            expires_in=expires_in,
            event_type="token_refreshed",
        )
        return access_token
