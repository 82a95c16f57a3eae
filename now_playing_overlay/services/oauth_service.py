"""One-time Spotify authorization-code setup flow."""

import secrets
import time
from urllib.parse import urlencode

import httpx

from now_playing_overlay.config import Settings
from now_playing_overlay.exceptions import ErrorCode, SetupException
from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.services.token_service import SPOTIFY_TOKEN_URL

logger = get_logger(__name__)

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_SCOPES = ["user-read-playback-state"]

# Abandoned authorizations are forgotten after 10 minutes
OAUTH_STATE_TTL_SECONDS = 600


class SetupFlow:
    """Builds the authorize URL and exchanges the returned code for a refresh token.

    The refresh token is only handed back for the operator to copy into
    ``.env``; nothing is stored and polling is not started.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings
        self._states: dict[str, float] = {}  # state -> timestamp

    def _cleanup_expired_states(self) -> None:
        current_time = time.time()
        expired = [state for state, ts in self._states.items() if current_time - ts > OAUTH_STATE_TTL_SECONDS]
        for state in expired:
            self._states.pop(state, None)

    def authorize_url(self) -> str:
        """Build the Spotify authorization URL with a fresh CSRF state."""
        self._cleanup_expired_states()

        state = secrets.token_urlsafe(32)
        self._states[state] = time.time()

        params = {
            "client_id": self._settings.client_id,
            "response_type": "code",
            "redirect_uri": self._settings.redirect_uri,
            "scope": " ".join(SPOTIFY_SCOPES),
            "state": state,
        }
        return f"{SPOTIFY_AUTHORIZE_URL}?{urlencode(params)}"

    def consume_state(self, state: str | None) -> None:
        """Check and forget a state value issued by authorize_url().

        Raises:
            SetupException: If the state is missing, unknown or expired
        """
        self._cleanup_expired_states()
        if not state or self._states.pop(state, None) is None:
            raise SetupException("Invalid or expired state parameter", code=ErrorCode.SETUP_INVALID_STATE)

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for a refresh token.

        Args:
            code: The ``code`` query parameter Spotify sent to the redirect URI

        Returns:
            Refresh token

        Raises:
            SetupException: If the exchange fails or no refresh token is returned
        """
        try:
            response = await self._client.post(
                SPOTIFY_TOKEN_URL,
                auth=(self._settings.client_id, self._settings.client_secret),
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self._settings.redirect_uri,
                },
                timeout=10.0,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            log_with_context(
                logger,
                "error",
                "Authorization code exchange rejected",
                status_code=e.response.status_code,
                response=e.response.text[:200],
                event_type="setup_exchange_failed",
            )
            raise SetupException(
                f"Error exchanging code for token: Spotify returned {e.response.status_code}",
                status_code=502,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            log_with_context(
                logger,
                "error",
                "Authorization code exchange failed",
                error=str(e),
                event_type="setup_exchange_failed",
            )
            raise SetupException(f"Error exchanging code for token: {e}", status_code=502) from e
        except ValueError as e:
            raise SetupException("Invalid Spotify token response", status_code=502) from e

        refresh_token = data.get("refresh_token") if isinstance(data, dict) else None
        if not refresh_token:
            raise SetupException("No refresh token received", status_code=502)

        log_with_context(logger, "info", "Authorization code exchanged", event_type="setup_exchange_success")
        return refresh_token
