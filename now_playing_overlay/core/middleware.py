"""Middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from now_playing_overlay.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def setup_middleware(app: FastAPI) -> Limiter:
    """Configure all middleware for the application.

    Args:
        app: FastAPI application instance

    Returns:
        Limiter instance for rate limiting
    """
    # OBS browser sources load the overlay from arbitrary origins
    log_with_context(logger, "debug", "Configuring CORS middleware", event_type="security_config")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter

    return limiter
