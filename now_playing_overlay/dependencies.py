"""FastAPI dependencies for dependency injection."""

import httpx
from fastapi import Request

from now_playing_overlay.config import Settings
from now_playing_overlay.services.oauth_service import SetupFlow
from now_playing_overlay.services.overlay_service import OverlayService


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Get the shared HTTP client from app state.

    Raises:
        RuntimeError: If HTTP client is not initialized.
    """
    client: httpx.AsyncClient | None = getattr(request.app.state, "http_client", None)

    if client is None:
        raise RuntimeError("HTTP client not initialized. This should never happen.")

    return client


async def get_app_settings(request: Request) -> Settings:
    """Get the Settings the app was created with."""
    settings: Settings | None = getattr(request.app.state, "settings", None)

    if settings is None:
        raise RuntimeError("Settings not initialized.")

    return settings


async def get_overlay_service(request: Request) -> OverlayService:
    """
    Get the overlay service from app state.

    Raises:
        RuntimeError: If the overlay service is not initialized.
    """
    service: OverlayService | None = getattr(request.app.state, "overlay_service", None)

    if service is None:
        raise RuntimeError("Overlay service not initialized.")

    return service


async def get_setup_flow(request: Request) -> SetupFlow:
    """
    Get the OAuth setup flow from app state.

    Raises:
        RuntimeError: If the setup flow is not initialized.
    """
    flow: SetupFlow | None = getattr(request.app.state, "setup_flow", None)

    if flow is None:
        raise RuntimeError("Setup flow not initialized.")

    return flow
