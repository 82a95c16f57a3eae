"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import httpx
import pytest

from now_playing_overlay import config
from now_playing_overlay.config import Settings
from now_playing_overlay.routers import setup_router
from now_playing_overlay.services.playback_service import SPOTIFY_CURRENTLY_PLAYING_URL

SETTINGS_ENV_VARS = [
    "CLIENT_ID",
    "CLIENT_SECRET",
    "REDIRECT_URI",
    "REFRESH_TOKEN",
    "HOST",
    "PORT",
    "POLL_INTERVAL_MS",
    "MAX_FETCH_ATTEMPTS",
    "OVERLAY_BG_COLOR",
    "TEXT_COLOR",
    "PROGRESS_BAR_COLOR",
    "LOG_LEVEL",
    "LOG_DIR",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and .env file."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_settings_instance", None)
    setup_router.limiter.reset()
    yield


@pytest.fixture
def mock_settings():
    """Settings instance with test values and a refresh token."""
    return Settings(
        _env_file=None,
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://127.0.0.1:3001/callback",
        refresh_token="test-refresh-token",
    )


@pytest.fixture
def setup_settings():
    """Settings instance without a refresh token (setup required)."""
    return Settings(
        _env_file=None,
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://127.0.0.1:3001/callback",
    )


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for Spotify calls."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock()
    mock_client.post = AsyncMock()
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture
def make_response():
    """Build real httpx.Response objects bound to a request."""

    def _make_response(
        status_code: int = 200,
        json=None,
        headers: dict[str, str] | None = None,
        method: str = "GET",
        url: str = SPOTIFY_CURRENTLY_PLAYING_URL,
    ) -> httpx.Response:
        return httpx.Response(
            status_code,
            json=json,
            headers=headers,
            request=httpx.Request(method, url),
        )

    return _make_response


class FakeTokenProvider:
    """Token provider handing out a fixed sequence of refreshed tokens."""

    def __init__(self, token: str | None = "access-1", refreshed: list[str | None] | None = None):
        self.token = token
        self._refreshed = list(refreshed) if refreshed is not None else [f"access-{i}" for i in range(2, 20)]
        self.refresh_calls = 0

    async def get_token(self) -> str | None:
        return self.token

    async def refresh(self) -> str | None:
        self.refresh_calls += 1
        new_token = self._refreshed.pop(0) if self._refreshed else None
        if new_token is not None:
            self.token = new_token
        return new_token


@pytest.fixture
def fake_token_provider():
    """Token provider holding 'access-1' and refreshing to 'access-2', 'access-3', ..."""
    return FakeTokenProvider()


@pytest.fixture
def fake_token_provider_factory():
    return FakeTokenProvider


@pytest.fixture
def spotify_currently_playing_payload():
    """Currently-playing response body with two artists."""
    return {
        "timestamp": 1700000000000,
        "progress_ms": 60000,
        "is_playing": True,
        "currently_playing_type": "track",
        "item": {
            "name": "Under Pressure",
            "artists": [{"name": "Queen"}, {"name": "David Bowie"}],
            "album": {
                "name": "Hot Space",
                "images": [
                    {"url": "https://i.scdn.co/image/large.jpg", "height": 640, "width": 640},
                    {"url": "https://i.scdn.co/image/small.jpg", "height": 64, "width": 64},
                ],
            },
            "duration_ms": 248000,
            "uri": "spotify:track:test123",
        },
    }
