"""Integration tests for the HTTP surface."""

from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from now_playing_overlay.config import Settings
from now_playing_overlay.core.app_factory import create_app
from now_playing_overlay.dependencies import get_overlay_service, get_setup_flow
from now_playing_overlay.exceptions import RateLimitedException, SetupException
from now_playing_overlay.models import PlaybackSnapshot
from now_playing_overlay.services.oauth_service import SetupFlow


@pytest.fixture
def fake_flow():
    """Setup flow whose state check passes and whose exchange is controlled by the test."""
    flow = MagicMock(spec=SetupFlow)
    flow.consume_state = MagicMock()
    flow.exchange_code = AsyncMock(return_value="issued-refresh-token")
    return flow


@pytest.fixture
def setup_client(setup_settings, mock_http_client):
    """App without lifespan, holding a real SetupFlow over a mocked HTTP client."""
    app = create_app(setup_settings)
    app.state.setup_flow = SetupFlow(mock_http_client, setup_settings)
    return TestClient(app)


def test_health_endpoint(setup_settings):
    """Test health check endpoint."""
    client = TestClient(create_app(setup_settings))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "version" in response.json()


def test_current_before_setup(setup_settings):
    """Test /current reports nothing playing when setup has not been done."""
    with TestClient(create_app(setup_settings)) as client:
        response = client.get("/current")
        ready = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"playing": False}
    assert ready.status_code == 503
    assert ready.json()["checks"]["poll_loop"] == "setup_required"
    assert ready.json()["checks"]["refresh_token"] == "missing"


def test_current_with_snapshot(setup_settings):
    """Test /current exposes the snapshot fields in camelCase."""
    snapshot = PlaybackSnapshot(
        title="Under Pressure",
        artist="Queen, David Bowie",
        album_art="https://i.scdn.co/image/large.jpg",
        duration_ms=248000,
        progress_ms=60000,
        is_playing=True,
    )
    service = MagicMock()
    service.current_snapshot = AsyncMock(return_value=snapshot)
    app = create_app(setup_settings)
    app.dependency_overrides[get_overlay_service] = lambda: service

    response = TestClient(app).get("/current")

    assert response.status_code == 200
    assert response.json() == {
        "playing": True,
        "title": "Under Pressure",
        "artist": "Queen, David Bowie",
        "albumArt": "https://i.scdn.co/image/large.jpg",
        "durationMs": 248000,
        "progressMs": 60000,
        "isPlaying": True,
    }


def test_current_paused_track_without_art(setup_settings):
    """Test a paused track is still reported as playing with null album art."""
    service = MagicMock()
    service.current_snapshot = AsyncMock(
        return_value=PlaybackSnapshot(title="Song", artist="Artist", duration_ms=1000, progress_ms=0)
    )
    app = create_app(setup_settings)
    app.dependency_overrides[get_overlay_service] = lambda: service

    data = TestClient(app).get("/current").json()

    assert data["playing"] is True
    assert data["isPlaying"] is False
    assert data["albumArt"] is None


def test_config_defaults(setup_client):
    """Test /config returns the default display settings."""
    response = setup_client.get("/config")

    assert response.status_code == 200
    assert response.json() == {
        "pollInterval": 3000,
        "overlayBgColor": "black",
        "textColor": "white",
        "progressBarColor": "#1DB954",
    }


def test_config_from_environment(monkeypatch):
    """Test /config reflects POLL_INTERVAL_MS and colours from the environment."""
    monkeypatch.setenv("POLL_INTERVAL_MS", "5000")
    monkeypatch.setenv("PROGRESS_BAR_COLOR", "#ff00ff")
    settings = Settings(
        _env_file=None,
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://127.0.0.1:3001/callback",
    )

    data = TestClient(create_app(settings)).get("/config").json()

    assert data["pollInterval"] == 5000
    assert data["progressBarColor"] == "#ff00ff"


def test_config_invalid_interval_falls_back(monkeypatch):
    """Test an unusable POLL_INTERVAL_MS is served as 3000."""
    monkeypatch.setenv("POLL_INTERVAL_MS", "not-a-number")
    settings = Settings(
        _env_file=None,
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://127.0.0.1:3001/callback",
    )

    assert TestClient(create_app(settings)).get("/config").json()["pollInterval"] == 3000


def test_setup_redirects_to_spotify(setup_client):
    """Test /setup redirects to the Spotify authorization page."""
    response = setup_client.get("/setup", follow_redirects=False)

    assert response.status_code == 307
    location = urlparse(response.headers["location"])
    params = parse_qs(location.query)
    assert location.netloc == "accounts.spotify.com"
    assert params["client_id"] == ["test-client-id"]
    assert params["scope"] == ["user-read-playback-state"]
    assert params["redirect_uri"] == ["http://127.0.0.1:3001/callback"]


def test_setup_is_rate_limited(setup_client):
    """Test repeated /setup requests are throttled."""
    statuses = [setup_client.get("/setup", follow_redirects=False).status_code for _ in range(11)]

    assert statuses[:10] == [307] * 10
    assert statuses[10] == 429


def test_callback_without_code(setup_client):
    """Test /callback without a code renders an error page."""
    response = setup_client.get("/callback")

    assert response.status_code == 400
    assert "No code received from Spotify." in response.text
    assert "Try again" in response.text


def test_callback_with_error_param(setup_client):
    """Test a denied authorization renders the Spotify error."""
    response = setup_client.get("/callback", params={"error": "access_denied"})

    assert response.status_code == 400
    assert "access_denied" in response.text


def test_callback_with_unknown_state(setup_client, mock_http_client):
    """Test a callback with a state we never issued is rejected before any exchange."""
    response = setup_client.get("/callback", params={"code": "auth-code", "state": "forged"})

    assert response.status_code == 400
    mock_http_client.post.assert_not_called()


def test_callback_success(setup_settings, fake_flow):
    """Test a successful exchange shows the refresh token and overlay URL."""
    app = create_app(setup_settings)
    app.dependency_overrides[get_setup_flow] = lambda: fake_flow

    response = TestClient(app).get("/callback", params={"code": "auth-code", "state": "s"})

    assert response.status_code == 200
    assert "issued-refresh-token" in response.text
    assert "http://127.0.0.1:3001/overlay.html" in response.text
    fake_flow.consume_state.assert_called_once_with("s")
    fake_flow.exchange_code.assert_awaited_once_with("auth-code")


def test_callback_exchange_failure(setup_settings, fake_flow):
    """Test a failed exchange renders an error page with the gateway status."""
    fake_flow.exchange_code.side_effect = SetupException("Token exchange failed", status_code=502)
    app = create_app(setup_settings)
    app.dependency_overrides[get_setup_flow] = lambda: fake_flow

    response = TestClient(app).get("/callback", params={"code": "auth-code", "state": "s"})

    assert response.status_code == 502
    assert "Token exchange failed" in response.text
    assert "Try again" in response.text


def test_overlay_page(setup_client):
    """Test the overlay page is served at /overlay.html and under /static."""
    response = setup_client.get("/overlay.html")
    static = setup_client.get("/static/overlay.html")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "/current" in response.text
    assert static.status_code == 200


def test_overlay_exception_rendered_as_json(setup_settings):
    """Test OverlayException subclasses become structured JSON errors."""
    app = create_app(setup_settings)
    router = APIRouter()

    @router.get("/boom")
    async def boom():
        raise RateLimitedException(retry_after=7)

    app.include_router(router)

    response = TestClient(app).get("/boom")

    assert response.status_code == 429
    assert response.json() == {
        "error": {
            "code": "UPSTREAM_RATE_LIMITED",
            "message": "Rate limited by Spotify",
            "details": {"retry_after": 7},
        }
    }
