"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from now_playing_overlay import __version__
from now_playing_overlay.config import Settings, get_settings
from now_playing_overlay.core.lifespan import lifespan
from now_playing_overlay.core.middleware import setup_middleware
from now_playing_overlay.middleware.error_handlers import register_error_handlers
from now_playing_overlay.routers import health_router, overlay_router, setup_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with (defaults to the singleton)

    Returns:
        Configured FastAPI application instance

    Raises:
        ConfigurationException: If settings are not given and the environment is incomplete
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Now Playing Overlay",
        description="""
        Publishes the track currently playing on Spotify as JSON for a browser overlay.

        ## Setup
        1. Visit /setup and authorize with Spotify
        2. Copy the refresh token into `.env` as `REFRESH_TOKEN`
        3. Restart the server and add /overlay.html as a browser source
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    setup_middleware(app)
    register_error_handlers(app)

    app.mount("/static", StaticFiles(directory=str(overlay_router.STATIC_DIR)), name="static")

    app.include_router(overlay_router.router, tags=["overlay"])
    app.include_router(setup_router.router, tags=["setup"])
    app.include_router(health_router.router, tags=["health"])

    return app
