"""Custom exceptions for the overlay server with HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    OVERLAY_ERROR = "OVERLAY_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Upstream (Spotify) errors
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UPSTREAM_AUTH_ERROR = "UPSTREAM_AUTH_ERROR"
    UPSTREAM_TOKEN_REJECTED = "UPSTREAM_TOKEN_REJECTED"
    UPSTREAM_RATE_LIMITED = "UPSTREAM_RATE_LIMITED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_RETRIES_EXHAUSTED = "UPSTREAM_RETRIES_EXHAUSTED"

    # OAuth setup errors
    SETUP_ERROR = "SETUP_ERROR"
    SETUP_INVALID_STATE = "SETUP_INVALID_STATE"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"


class OverlayException(Exception):
    """Base exception for overlay errors with HTTP status code support.

    All custom exceptions inherit from this class so the error handlers
    can render them consistently.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.OVERLAY_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize overlay exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ConfigurationException(OverlayException):
    """Required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, 500, details)


class UpstreamException(OverlayException):
    """Spotify API errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UPSTREAM_ERROR,
        status_code: int = 502,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class UpstreamAuthException(UpstreamException):
    """Credential exchange failed or no usable access token is held."""

    def __init__(
        self,
        message: str = "Spotify authentication failed",
        code: ErrorCode = ErrorCode.UPSTREAM_AUTH_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=401, details=details)


class AccessTokenRejectedException(UpstreamAuthException):
    """Spotify answered 401 to a read with the current access token."""

    def __init__(self, message: str = "Access token rejected", details: dict[str, Any] | None = None):
        super().__init__(message, code=ErrorCode.UPSTREAM_TOKEN_REJECTED, details=details)


class RateLimitedException(UpstreamException):
    """Spotify answered 429."""

    def __init__(self, retry_after: float, message: str = "Rate limited by Spotify"):
        self.retry_after = retry_after
        super().__init__(
            message,
            code=ErrorCode.UPSTREAM_RATE_LIMITED,
            status_code=429,
            details={"retry_after": retry_after},
        )


class UpstreamUnavailableException(UpstreamException):
    """Network failure, unexpected status or malformed payload."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            status_code=502,
            details=details,
        )


class RetriesExhaustedException(UpstreamException):
    """The bounded retry loop gave up."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        details: dict[str, Any] = {"attempts": attempts}
        if last_error is not None:
            details["last_error"] = type(last_error).__name__
        super().__init__(
            f"Gave up after {attempts} attempts",
            code=ErrorCode.UPSTREAM_RETRIES_EXHAUSTED,
            status_code=503,
            details=details,
        )


class SetupException(OverlayException):
    """OAuth setup flow failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SETUP_ERROR,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
