"""
Music Service Factory

Creates catalog adapters wired with the configured credentials. Every call
gets its own adapter (and so its own HTTP session), while all adapters for a
service share one rate limiter.
"""

from typing import Any, Dict, Optional

import structlog

from ..models.config_models import SystemConfig
from .music_service import MusicService
from .rate_limiter import UnifiedRateLimiter
from .spotify_client import SpotifyAdapter
from .youtube_client import YouTubeAdapter

logger = structlog.get_logger(__name__)

SPOTIFY = "spotify"
YOUTUBE = "youtube"
SUPPORTED_SERVICES = (SPOTIFY, YOUTUBE)


class MusicServiceFactory:
    """
    Factory for configured music service adapters.

    Adapters are short-lived: open one with ``async with`` per use. Rate
    limiters are created once per service name and live as long as the
    factory, so quotas hold across concurrent requests.
    """

    def __init__(self, system_config: Optional[SystemConfig] = None):
        """
        Initialize service factory.

        Args:
            system_config: System configuration (defaults to built-in defaults)
        """
        self.system_config = system_config or SystemConfig()
        self.logger = logger.bind(component="MusicServiceFactory")

        self._rate_limiters: Dict[str, UnifiedRateLimiter] = {}

        self.logger.info("Music Service Factory initialized", preferred=self.system_config.music_service)

    def get_service(self, service_name: str) -> MusicService:
        """
        Create a fresh adapter for a service.

        Args:
            service_name: 'spotify' or 'youtube' (case-insensitive)

        Returns:
            New adapter sharing the service's rate limiter

        Raises:
            ValueError: For an unknown service name
        """
        name = service_name.lower()
        if name not in SUPPORTED_SERVICES:
            raise ValueError(f"Unknown music service: {service_name}")

        return self._create(name, self._rate_limiter(name))

    def get_preferred_service(self) -> MusicService:
        """
        Best available service.

        The configured service is tried first; an unauthenticated one falls
        through to the other catalog, ending at YouTube.
        """
        order = [self.system_config.music_service.lower()]
        order += [name for name in (SPOTIFY, YOUTUBE) if name not in order]

        for name in order:
            if name not in SUPPORTED_SERVICES:
                self.logger.warning("Ignoring unknown configured music service", service=name)
                continue
            service = self.get_service(name)
            if service.is_authenticated():
                return service

        return self.get_service(YOUTUBE)

    def get_rate_limiter_stats(self) -> Dict[str, Dict[str, Any]]:
        """Usage statistics for every service used so far."""
        return {
            name: rate_limiter.get_current_usage()
            for name, rate_limiter in self._rate_limiters.items()
        }

    def _rate_limiter(self, name: str) -> UnifiedRateLimiter:
        if name not in self._rate_limiters:
            config = self.system_config
            if name == SPOTIFY:
                self._rate_limiters[name] = UnifiedRateLimiter.for_spotify(config.spotify_rate_limit)
            else:
                self._rate_limiters[name] = UnifiedRateLimiter.for_youtube(config.youtube_rate_limit)
            self.logger.info("Rate limiter created", service=name)
        return self._rate_limiters[name]

    def _create(self, name: str, rate_limiter: UnifiedRateLimiter) -> MusicService:
        config = self.system_config
        if name == SPOTIFY:
            return SpotifyAdapter(access_token=config.spotify_access_token, rate_limiter=rate_limiter)
        return YouTubeAdapter(api_key=config.youtube_api_key, rate_limiter=rate_limiter)
