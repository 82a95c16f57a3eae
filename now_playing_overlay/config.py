from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from now_playing_overlay.exceptions import ConfigurationException, ErrorCode
from now_playing_overlay.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_MS = 3000


class Settings(BaseSettings):
    """Application settings with validation.

    The Spotify client credentials and redirect URI are required; everything
    else has a documented default. Values come from environment variables or
    a ``.env`` file in the working directory.

    LOG_LEVEL and LOG_DIR are not settings: main() reads them before
    validation so configuration errors are logged too.
    """

    # Spotify API - required
    client_id: str = Field(min_length=1, description="Spotify OAuth client ID")
    client_secret: str = Field(min_length=1, description="Spotify OAuth client secret")
    redirect_uri: str = Field(min_length=1, description="Spotify OAuth redirect URI")
    refresh_token: str = Field(default="", description="Spotify refresh token (printed by /callback)")

    # Server
    host: str = Field(default="127.0.0.1", min_length=1, description="Bind address")
    port: int = Field(default=3001, ge=1, le=65535, description="Bind port")

    # Polling
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, description="Delay between poll cycles")
    max_fetch_attempts: int = Field(default=3, ge=1, le=10, description="Spotify reads per poll cycle")

    # Overlay display
    overlay_bg_color: str = Field(default="black")
    text_color: str = Field(default="white")
    progress_bar_color: str = Field(default="#1DB954")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("client_id", "client_secret", mode="after")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("refresh_token", mode="after")
    @classmethod
    def strip_refresh_token(cls, v: str) -> str:
        return v.strip()

    @field_validator("redirect_uri", mode="after")
    @classmethod
    def validate_redirect_uri(cls, v: str) -> str:
        """Ensure redirect URI is an http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("redirect_uri must be a valid http:// or https:// URL")
        return v

    @field_validator("poll_interval_ms", mode="before")
    @classmethod
    def validate_poll_interval(cls, v: Any) -> int:
        """Fall back to the default interval for unparsable or non-positive values."""
        try:
            interval = int(v)
        except (TypeError, ValueError):
            interval = 0
        if interval <= 0:
            log_with_context(
                logger,
                "warning",
                "Invalid poll interval, using default",
                value=str(v),
                default=DEFAULT_POLL_INTERVAL_MS,
                event_type="config_poll_interval_invalid",
            )
            return DEFAULT_POLL_INTERVAL_MS
        return interval

    @property
    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token)

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000


def load_settings(**overrides: Any) -> Settings:
    """Build a Settings instance, translating validation errors.

    Args:
        **overrides: Explicit values taking precedence over the environment

    Returns:
        Validated Settings

    Raises:
        ConfigurationException: If required values are missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]).upper() for err in e.errors() if err["type"] == "missing"]
        invalid = [
            ".".join(str(p) for p in err["loc"]).upper() for err in e.errors() if err["type"] != "missing"
        ]
        if missing:
            raise ConfigurationException(
                f"Missing required configuration: {', '.join(missing)}",
                code=ErrorCode.CONFIG_MISSING,
                details={"missing": missing, "invalid": invalid},
            ) from e
        raise ConfigurationException(
            f"Invalid configuration: {', '.join(invalid)}",
            details={"invalid": invalid},
        ) from e


# Singleton settings instance
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance.

    Returns:
        Cached Settings instance

    Raises:
        ConfigurationException: If required values are missing or invalid
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = load_settings()
    return _settings_instance
