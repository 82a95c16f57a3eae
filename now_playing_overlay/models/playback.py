"""Pydantic models for the overlay JSON endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlaybackSnapshot(BaseModel):
    """Normalised view of what is currently playing.

    Serialised with camelCase aliases (``albumArt``, ``durationMs``, ...) for the overlay page.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    artist: str = Field(..., description="Comma-joined artist names, in the order Spotify lists them")
    album_art: str | None = None
    duration_ms: int = Field(..., ge=0)
    progress_ms: int = Field(default=0, ge=0)
    is_playing: bool = False


class OverlayConfig(BaseModel):
    """Display configuration served to the overlay page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    poll_interval: int = Field(..., gt=0, description="Overlay refresh interval in milliseconds")
    overlay_bg_color: str
    text_color: str
    progress_bar_color: str
