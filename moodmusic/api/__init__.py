"""
API Module

Music catalog adapters with shared HTTP handling, rate limiting and error
handling. The FastAPI app lives in ``moodmusic.api.backend``.
"""

from .base_client import BaseAPIClient
from .rate_limiter import UnifiedRateLimiter
from .music_service import MusicService, MusicServiceError
from .spotify_client import SpotifyAdapter
from .youtube_client import YouTubeAdapter
from .client_factory import MusicServiceFactory

__all__ = [
    # Base infrastructure
    "BaseAPIClient",
    "UnifiedRateLimiter",

    # Service contract
    "MusicService",
    "MusicServiceError",

    # Adapters
    "SpotifyAdapter",
    "YouTubeAdapter",

    # Factory
    "MusicServiceFactory",
]
