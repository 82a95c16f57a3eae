"""Overlay JSON endpoints and the overlay page."""

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from now_playing_overlay.config import Settings
from now_playing_overlay.dependencies import get_app_settings, get_overlay_service
from now_playing_overlay.models import OverlayConfig
from now_playing_overlay.services.overlay_service import OverlayService

router = APIRouter()

STATIC_DIR = Path(__file__).parent.parent / "static"


@router.get(
    "/current",
    summary="Get the currently playing track",
    responses={
        200: {
            "description": "Latest snapshot from the poll loop",
            "content": {
                "application/json": {
                    "example": {
                        "playing": True,
                        "title": "Bohemian Rhapsody",
                        "artist": "Queen",
                        "albumArt": "https://i.scdn.co/image/ab67616d0000b273",
                        "durationMs": 354000,
                        "progressMs": 125000,
                        "isPlaying": True,
                    }
                }
            },
        },
    },
)
async def get_current(service: OverlayService = Depends(get_overlay_service)) -> dict[str, Any]:
    """Return the latest snapshot, or ``{"playing": false}``.

    Never calls Spotify; upstream failures show up as ``playing: false``.
    """
    snapshot = await service.current_snapshot()
    if snapshot is None:
        return {"playing": False}
    return {"playing": True, **snapshot.model_dump(by_alias=True)}


@router.get("/config", summary="Get overlay display configuration")
async def get_config(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    """Poll interval and colours for the overlay page."""
    config = OverlayConfig(
        poll_interval=settings.poll_interval_ms,
        overlay_bg_color=settings.overlay_bg_color,
        text_color=settings.text_color,
        progress_bar_color=settings.progress_bar_color,
    )
    return config.model_dump(by_alias=True)


@router.get("/overlay.html", include_in_schema=False)
async def overlay_page() -> FileResponse:
    """Serve the overlay page for the OBS browser source."""
    return FileResponse(STATIC_DIR / "overlay.html", media_type="text/html")
