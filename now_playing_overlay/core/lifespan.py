"""Application lifespan management."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from now_playing_overlay import __version__
from now_playing_overlay.core.http_client import create_http_client
from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.services.oauth_service import SetupFlow
from now_playing_overlay.services.overlay_service import OverlayService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the HTTP client and overlay service, start polling, and tear down on shutdown.

    Exceptions after yield are re-raised so cleanup still runs.
    """
    settings = app.state.settings
    app.state.startup_time = time.time()

    log_with_context(
        logger,
        "info",
        "Starting Now Playing Overlay",
        version=__version__,
        url=f"http://{settings.host}:{settings.port}",
        event_type="app_startup",
    )

    client = create_http_client()
    app.state.http_client = client

    overlay_service = OverlayService(settings, client)
    app.state.overlay_service = overlay_service
    app.state.setup_flow = SetupFlow(client, settings)
    await overlay_service.initialize()
    log_with_context(
        logger,
        "info",
        "Overlay service initialized",
        poll_state=overlay_service.poll_state.value,
        event_type="overlay_service_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(logger, "info", "Shutting down Now Playing Overlay", event_type="app_shutdown")

        await overlay_service.cleanup()
        await client.aclose()
        log_with_context(logger, "info", "HTTP client closed", event_type="http_client_cleanup")
