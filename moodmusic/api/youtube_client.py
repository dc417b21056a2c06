"""
YouTube Data API Adapter

Mood-driven music search against the YouTube Data API v3. Only public search
endpoints are used, so an API key is all the adapter needs.
"""

from typing import Any, Dict, List, Optional

import structlog

from ..models.track_models import Track
from .base_client import BaseAPIClient
from .music_service import MusicServiceError
from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)

MOOD_SEARCH_TERMS: Dict[str, str] = {
    "happy": "happy upbeat music",
    "sad": "sad emotional music",
    "energetic": "energetic dance music",
    "calm": "calm relaxing music",
    "neutral": "popular music",
    "angry": "angry intense music",
    "anxious": "tense dramatic music",
    "tired": "chill sleep music",
    "bored": "exciting catchy music",
}

MUSIC_CATEGORY_ID = "10"


class YouTubeAdapter(BaseAPIClient):
    """YouTube catalog adapter; recommendations are mood-flavoured searches."""

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: Optional[str] = None,
        rate_limiter: Optional[UnifiedRateLimiter] = None
    ):
        if rate_limiter is None:
            rate_limiter = UnifiedRateLimiter.for_youtube()

        super().__init__(
            base_url=self.BASE_URL,
            rate_limiter=rate_limiter,
            timeout=10,
            service_name="YouTube"
        )

        self.api_key = api_key
        self.logger.info("YouTube adapter initialized", has_api_key=bool(api_key))

    def is_authenticated(self) -> bool:
        """Public search needs no user authentication."""
        return True

    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        error_info = data.get("error")
        if not error_info:
            return None
        if isinstance(error_info, dict):
            return error_info.get("message", f"Error {error_info.get('code', 'unknown')}")
        return str(error_info)

    async def search_tracks(self, query: str, limit: int = 5) -> List[Track]:
        """
        Search music videos.

        Args:
            query: Search query; " music" is appended
            limit: Maximum results

        Returns:
            Matching videos as tracks
        """
        if not self.api_key:
            raise MusicServiceError(self.service_name, "API key not configured")

        data = await self._make_request(
            "search",
            {
                "part": "snippet",
                "maxResults": limit,
                "q": f"{query} music",
                "type": "video",
                "videoCategoryId": MUSIC_CATEGORY_ID,
                "key": self.api_key,
            }
        )

        tracks = [self._to_track(item) for item in data.get("items", [])]
        self.logger.info("YouTube search completed", query=query, results_count=len(tracks))
        return tracks

    async def get_recommendations_by_mood(
        self,
        mood: str,
        limit: int = 3,
        genre: Optional[str] = None
    ) -> List[Track]:
        """Search music videos matching a mood and optional genre."""
        mood_key = str(getattr(mood, "value", mood))
        search_term = MOOD_SEARCH_TERMS.get(mood_key, MOOD_SEARCH_TERMS["neutral"])
        if genre:
            search_term = f"{search_term} {genre}"

        return await self.search_tracks(f"{search_term} music video", limit)

    def _to_track(self, item: Dict[str, Any]) -> Track:
        video_id = item["id"]["videoId"]
        snippet = item.get("snippet", {})
        thumbnail = snippet.get("thumbnails", {}).get("high", {})
        return Track(
            id=video_id,
            title=snippet.get("title", ""),
            artist=snippet.get("channelTitle", ""),
            uri=video_id,
            album_art=thumbnail.get("url"),
            source="youtube",
        )
