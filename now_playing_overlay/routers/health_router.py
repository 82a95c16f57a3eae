"""Health endpoints."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from now_playing_overlay import __version__
from now_playing_overlay.dependencies import get_overlay_service
from now_playing_overlay.models import DetailedHealthResponse, HealthResponse
from now_playing_overlay.services.overlay_service import OverlayService
from now_playing_overlay.services.poll_loop import PollState

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic liveness check."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
async def readiness_check(service: OverlayService = Depends(get_overlay_service)):
    """Readiness probe - is the poll loop running?

    **Returns:**
    - 200: The poll loop is polling
    - 503: Setup is required or the loop has stopped
    """
    poll_state = service.poll_state
    updated_at = await service.playback_state.get_updated_at()

    checks = {
        "poll_loop": poll_state.value,
        "refresh_token": "ok" if service.credentials.has_refresh_token else "missing",
        "access_token": "ok" if await service.credentials.get_token() else "missing",
        "poll_cycles": str(await service.playback_state.get_cycle_count()),
        "last_poll_age_seconds": f"{time.time() - updated_at:.1f}" if updated_at is not None else "never",
    }
    healthy = poll_state is PollState.POLLING

    return JSONResponse(
        status_code=200 if healthy else 503,
        content=DetailedHealthResponse(
            status="healthy" if healthy else "unhealthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            checks=checks,
        ).model_dump(mode="json"),
    )
