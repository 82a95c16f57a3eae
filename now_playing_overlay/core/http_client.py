"""Shared httpx client construction."""

import os
from collections.abc import Callable
from typing import Any

import httpx

from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.middleware.logging_middleware import redact_sensitive_data

logger = get_logger(__name__)


async def log_request(request: httpx.Request) -> None:
    """Event hook to log requests with redacted sensitive data."""
    log_with_context(
        logger,
        "debug",
        "HTTP Request",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        event_type="http_request",
    )


async def log_response(response: httpx.Response) -> None:
    """Event hook to log responses with redacted sensitive data."""
    log_with_context(
        logger,
        "debug",
        "HTTP Response",
        status_code=response.status_code,
        url=redact_sensitive_data(str(response.request.url)),
        event_type="http_response",
    )


def create_http_client() -> httpx.AsyncClient:
    """Create the pooled AsyncClient shared by the poller and the setup flow.

    Honours HTTP_PROXY / HTTPS_PROXY when set.
    """
    proxy = os.getenv("HTTPS_PROXY") or os.getenv("HTTP_PROXY")

    event_hooks: dict[str, list[Callable[..., Any]]] = {
        "request": [log_request],
        "response": [log_response],
    }

    if proxy:
        log_with_context(
            logger,
            "info",
            "Creating HTTP client with proxy",
            proxy=redact_sensitive_data(proxy),
            event_type="http_client_config",
        )

    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=5.0,  # Connection establishment timeout
            read=10.0,  # Read response timeout
            write=5.0,  # Write operation timeout
            pool=5.0,  # Pool checkout timeout
        ),
        limits=httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0,
        ),
        proxy=proxy or None,
        event_hooks=event_hooks,
    )
