"""Now Playing Overlay models"""

from now_playing_overlay.models.base_models import DetailedHealthResponse, HealthResponse
from now_playing_overlay.models.playback import OverlayConfig, PlaybackSnapshot

__all__ = [
    "DetailedHealthResponse",
    "HealthResponse",
    "OverlayConfig",
    "PlaybackSnapshot",
]
