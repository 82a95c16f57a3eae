"""Command line entry point."""

import os
import sys

import uvicorn
from dotenv import load_dotenv

from now_playing_overlay.config import get_settings
from now_playing_overlay.core.app_factory import create_app
from now_playing_overlay.exceptions import ConfigurationException
from now_playing_overlay.logging_config import get_logger, log_with_context, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Validate configuration and serve the overlay.

    Exits with status 1 before binding the listener if required settings are missing.
    """
    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_DIR", "logs"))

    try:
        settings = get_settings()
    except ConfigurationException as e:
        log_with_context(
            logger,
            "error",
            f"{e.message}. Please set CLIENT_ID, CLIENT_SECRET, and REDIRECT_URI in your .env file",
            error_code=e.code.value,
            **e.details,
            event_type="config_invalid",
        )
        sys.exit(1)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
