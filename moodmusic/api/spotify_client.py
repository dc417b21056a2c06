"""
Spotify Web API Adapter

Mood-driven search and recommendations against the Spotify Web API. The host
performs the OAuth flow and hands over the resulting user access token.
"""

import time
from typing import Any, Dict, List, Optional

import structlog

from ..models.track_models import Track
from .base_client import BaseAPIClient
from .music_service import MusicServiceError
from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)

# Audio-feature targets passed straight to /recommendations
MOOD_PARAMETERS: Dict[str, Dict[str, float]] = {
    "happy": {"min_valence": 0.7, "target_energy": 0.8, "target_tempo": 120},
    "sad": {"max_valence": 0.4, "target_energy": 0.4, "target_tempo": 80},
    "energetic": {"min_energy": 0.8, "target_valence": 0.6, "min_tempo": 120},
    "calm": {"max_energy": 0.4, "target_valence": 0.5, "max_tempo": 100},
    "neutral": {"target_valence": 0.5, "target_energy": 0.5},
    "angry": {"target_energy": 0.8, "min_tempo": 130, "target_valence": 0.3},
    "anxious": {"target_energy": 0.6, "min_tempo": 110, "max_valence": 0.5},
    "tired": {"max_energy": 0.3, "max_tempo": 85, "target_valence": 0.4},
    "bored": {"target_energy": 0.7, "target_valence": 0.6, "target_tempo": 115},
}

MOOD_SEARCH_TERMS: Dict[str, str] = {
    "happy": "happy upbeat",
    "sad": "sad melancholy",
    "energetic": "energetic upbeat dance",
    "calm": "calm relaxing ambient",
    "neutral": "popular",
    "angry": "angry intense",
    "anxious": "tense nervous",
    "tired": "chill sleepy",
    "bored": "exciting catchy",
}

# User-facing genre names -> Spotify seed genres
GENRE_SEEDS: Dict[str, str] = {
    "rock": "rock",
    "pop": "pop",
    "hip hop": "hip-hop",
    "rap": "hip-hop",
    "classical": "classical",
    "jazz": "jazz",
    "blues": "blues",
    "country": "country",
    "electronic": "electronic",
    "dance": "dance",
    "edm": "edm",
    "r&b": "r-n-b",
    "soul": "soul",
    "folk": "folk",
    "indie": "indie",
    "metal": "metal",
    "punk": "punk",
    "alternative": "alt-rock",
    "reggae": "reggae",
    "ambient": "ambient",
    "techno": "techno",
    "house": "house",
    "disco": "disco",
    "funk": "funk",
    "latin": "latin",
}

FALLBACK_SEED_GENRES = "pop,rock,hip-hop"
SEED_TRACK_COUNT = 2
MAX_SEED_ARTISTS = 2


class SpotifyAdapter(BaseAPIClient):
    """
    Spotify catalog adapter.

    Recommendation flow:
    1. Search a couple of seed tracks with mood (and genre) terms
    2. Add a seed genre when the genre maps to one, else seed artists
    3. Fall back to generic seed genres when nothing else is available
    4. Ask /recommendations with the mood's audio-feature targets
    """

    BASE_URL = "https://api.spotify.com/v1"

    def __init__(
        self,
        access_token: Optional[str] = None,
        token_expires_at: Optional[float] = None,
        rate_limiter: Optional[UnifiedRateLimiter] = None
    ):
        """
        Initialize Spotify adapter.

        Args:
            access_token: User access token obtained by the host
            token_expires_at: Expiry as a unix timestamp, None if unknown
            rate_limiter: Rate limiter instance (defaults to the Spotify quota)
        """
        if rate_limiter is None:
            rate_limiter = UnifiedRateLimiter.for_spotify()

        super().__init__(
            base_url=self.BASE_URL,
            rate_limiter=rate_limiter,
            timeout=10,
            service_name="Spotify"
        )

        self.access_token = access_token
        self.token_expires_at = token_expires_at

        self.logger.info("Spotify adapter initialized", authenticated=self.is_authenticated())

    def set_access_token(self, access_token: str, expires_in: Optional[int] = None) -> None:
        """Install a fresh token handed over by the host."""
        self.access_token = access_token
        self.token_expires_at = time.time() + expires_in if expires_in else None

    def is_authenticated(self) -> bool:
        if not self.access_token:
            return False
        return self.token_expires_at is None or time.time() < self.token_expires_at

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract Spotify API error information from response data.

        Spotify reports errors as ``{"error": {"status": ..., "message": ...}}``.
        """
        if "error" in data:
            error_info = data["error"]
            if isinstance(error_info, dict):
                return error_info.get("message", f"Error {error_info.get('status', 'unknown')}")
            return str(error_info)
        return None

    def _ensure_authenticated(self) -> None:
        if not self.is_authenticated():
            raise MusicServiceError(self.service_name, "not authenticated", 401)

    async def search_tracks(self, query: str, limit: int = 5) -> List[Track]:
        """
        Search tracks by free text.

        Args:
            query: Search query
            limit: Number of results

        Returns:
            Matching tracks
        """
        self._ensure_authenticated()

        data = await self._make_request(
            "search",
            {"q": query, "type": "track", "limit": limit}
        )

        tracks = [self._to_track(item) for item in data.get("tracks", {}).get("items", [])]
        self.logger.info("Spotify search completed", query=query, results_count=len(tracks))
        return tracks

    async def get_recommendations_by_mood(
        self,
        mood: str,
        limit: int = 3,
        genre: Optional[str] = None
    ) -> List[Track]:
        """
        Recommend tracks for a mood, optionally narrowed to a genre.

        Unknown moods are treated as neutral.

        Args:
            mood: Mood tag
            limit: Number of tracks
            genre: Optional user genre

        Returns:
            Recommended tracks
        """
        self._ensure_authenticated()

        mood_key = str(getattr(mood, "value", mood))
        if mood_key not in MOOD_PARAMETERS:
            mood_key = "neutral"

        seed_genres: List[str] = []
        if genre and genre.lower() in GENRE_SEEDS:
            seed_genres.append(GENRE_SEEDS[genre.lower()])

        search_query = MOOD_SEARCH_TERMS[mood_key]
        if genre:
            search_query = f"{search_query} {genre}"

        seed_results = await self.search_tracks(search_query, SEED_TRACK_COUNT)
        seed_tracks = [track.id for track in seed_results]

        seed_artists: List[str] = []
        if seed_results and not seed_genres:
            for track in seed_results:
                for artist_id in track.artist_ids:
                    if artist_id not in seed_artists:
                        seed_artists.append(artist_id)
            seed_artists = seed_artists[:MAX_SEED_ARTISTS]

        params: Dict[str, Any] = {"limit": limit, **MOOD_PARAMETERS[mood_key]}
        if seed_tracks:
            params["seed_tracks"] = ",".join(seed_tracks)
        if seed_genres:
            params["seed_genres"] = ",".join(seed_genres)
        if seed_artists:
            params["seed_artists"] = ",".join(seed_artists)
        if not (seed_tracks or seed_genres or seed_artists):
            params["seed_genres"] = FALLBACK_SEED_GENRES

        data = await self._make_request("recommendations", params)
        tracks = [self._to_track(item) for item in data.get("tracks", [])]

        self.logger.info(
            "Spotify recommendations completed",
            mood=mood_key,
            genre=genre,
            seed_tracks=len(seed_tracks),
            seed_genres=params.get("seed_genres"),
            results_count=len(tracks)
        )
        return tracks

    def _to_track(self, item: Dict[str, Any]) -> Track:
        album = item.get("album") or {}
        images = album.get("images") or []
        artists = item.get("artists") or []
        return Track(
            id=item["id"],
            title=item.get("name", ""),
            artist=", ".join(artist["name"] for artist in artists),
            uri=item.get("uri", f"spotify:track:{item['id']}"),
            album=album.get("name"),
            album_art=images[0]["url"] if images else None,
            preview_url=item.get("preview_url"),
            artist_ids=[artist["id"] for artist in artists if artist.get("id")],
            source="spotify",
        )
