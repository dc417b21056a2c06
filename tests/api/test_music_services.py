"""
Tests for the music catalog adapters.

HTTP is never touched: adapters get ``_make_request`` patched, and the base
client is driven through a fake aiohttp session.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from moodmusic.api.client_factory import MusicServiceFactory
from moodmusic.api.music_service import MusicService, MusicServiceError
from moodmusic.api.rate_limiter import UnifiedRateLimiter
from moodmusic.api.spotify_client import MOOD_PARAMETERS, SpotifyAdapter
from moodmusic.api.youtube_client import YouTubeAdapter
from moodmusic.models.config_models import SystemConfig


def spotify_item(track_id, artist_ids=("a1",)):
    return {
        "id": track_id,
        "name": f"Song {track_id}",
        "uri": f"spotify:track:{track_id}",
        "album": {"name": "Album", "images": [{"url": "https://img/1.jpg"}]},
        "artists": [{"id": artist_id, "name": f"Artist {artist_id}"} for artist_id in artist_ids],
        "preview_url": None,
    }


def search_payload(*items):
    return {"tracks": {"items": list(items)}}


@pytest.fixture
def spotify():
    """Authenticated Spotify adapter."""
    return SpotifyAdapter(access_token="test-token")


@pytest.fixture
def youtube():
    """YouTube adapter with an API key."""
    return YouTubeAdapter(api_key="test-key")


class TestSpotifyAdapter:
    """Test Spotify search and recommendations."""

    @pytest.mark.asyncio
    async def test_search_maps_tracks(self, spotify):
        with patch.object(spotify, "_make_request", new=AsyncMock(
            return_value=search_payload(spotify_item("t1", ("a1", "a2")))
        )) as mock_request:
            tracks = await spotify.search_tracks("happy", limit=1)

        mock_request.assert_awaited_once_with("search", {"q": "happy", "type": "track", "limit": 1})
        assert len(tracks) == 1
        track = tracks[0]
        assert track.id == "t1"
        assert track.artist == "Artist a1, Artist a2"
        assert track.album_art == "https://img/1.jpg"
        assert track.artist_ids == ["a1", "a2"]
        assert track.source == "spotify"

    @pytest.mark.asyncio
    async def test_recommendations_with_known_genre(self, spotify):
        mock_request = AsyncMock(side_effect=[
            search_payload(spotify_item("t1"), spotify_item("t2")),
            {"tracks": [spotify_item("r1")]},
        ])
        with patch.object(spotify, "_make_request", new=mock_request):
            tracks = await spotify.get_recommendations_by_mood("happy", limit=5, genre="jazz")

        search_call, recommend_call = mock_request.await_args_list
        assert search_call.args == ("search", {"q": "happy upbeat jazz", "type": "track", "limit": 2})

        endpoint, params = recommend_call.args
        assert endpoint == "recommendations"
        assert params["limit"] == 5
        assert params["seed_tracks"] == "t1,t2"
        assert params["seed_genres"] == "jazz"
        assert "seed_artists" not in params
        assert params["min_valence"] == MOOD_PARAMETERS["happy"]["min_valence"]
        assert [track.id for track in tracks] == ["r1"]

    @pytest.mark.asyncio
    async def test_recommendations_seed_artists_without_genre(self, spotify):
        mock_request = AsyncMock(side_effect=[
            search_payload(spotify_item("t1", ("a1", "a2")), spotify_item("t2", ("a1", "a3"))),
            {"tracks": []},
        ])
        with patch.object(spotify, "_make_request", new=mock_request):
            await spotify.get_recommendations_by_mood("sad")

        params = mock_request.await_args_list[1].args[1]
        assert params["seed_artists"] == "a1,a2"
        assert "seed_genres" not in params
        assert params["limit"] == 3

    @pytest.mark.asyncio
    async def test_recommendations_fall_back_to_default_genres(self, spotify):
        mock_request = AsyncMock(side_effect=[search_payload(), {"tracks": []}])
        with patch.object(spotify, "_make_request", new=mock_request):
            await spotify.get_recommendations_by_mood("calm")

        params = mock_request.await_args_list[1].args[1]
        assert params["seed_genres"] == "pop,rock,hip-hop"
        assert "seed_tracks" not in params

    @pytest.mark.asyncio
    async def test_unknown_mood_treated_as_neutral(self, spotify):
        mock_request = AsyncMock(side_effect=[search_payload(), {"tracks": []}])
        with patch.object(spotify, "_make_request", new=mock_request):
            await spotify.get_recommendations_by_mood("nostalgic")

        assert mock_request.await_args_list[0].args[1]["q"] == "popular"
        params = mock_request.await_args_list[1].args[1]
        assert params["target_valence"] == 0.5
        assert params["target_energy"] == 0.5

    @pytest.mark.asyncio
    async def test_requires_token(self):
        adapter = SpotifyAdapter()
        assert not adapter.is_authenticated()

        with pytest.raises(MusicServiceError) as exc_info:
            await adapter.search_tracks("anything")
        assert exc_info.value.status == 401

    def test_expired_token_is_not_authenticated(self, spotify):
        spotify.set_access_token("new-token", expires_in=3600)
        assert spotify.is_authenticated()

        spotify.token_expires_at = 0
        assert not spotify.is_authenticated()

    def test_extract_api_error(self, spotify):
        assert spotify._extract_api_error({"error": {"status": 401, "message": "expired"}}) == "expired"
        assert spotify._extract_api_error({"tracks": []}) is None


class TestYouTubeAdapter:
    """Test YouTube search and mood queries."""

    @pytest.mark.asyncio
    async def test_search_params_and_mapping(self, youtube):
        payload = {"items": [{
            "id": {"videoId": "v1"},
            "snippet": {
                "title": "Calm Piano",
                "channelTitle": "Relax Channel",
                "thumbnails": {"high": {"url": "https://img/v1.jpg"}},
            },
        }]}
        with patch.object(youtube, "_make_request", new=AsyncMock(return_value=payload)) as mock_request:
            tracks = await youtube.search_tracks("piano", limit=4)

        endpoint, params = mock_request.await_args.args
        assert endpoint == "search"
        assert params["q"] == "piano music"
        assert params["maxResults"] == 4
        assert params["type"] == "video"
        assert params["videoCategoryId"] == "10"
        assert params["key"] == "test-key"

        assert tracks[0].id == "v1"
        assert tracks[0].artist == "Relax Channel"
        assert tracks[0].source == "youtube"

    @pytest.mark.asyncio
    async def test_recommendations_build_mood_query(self, youtube):
        with patch.object(youtube, "search_tracks", new=AsyncMock(return_value=[])) as mock_search:
            await youtube.get_recommendations_by_mood("sad", limit=3, genre="folk")

        mock_search.assert_awaited_once_with("sad emotional music folk music video", 3)

    @pytest.mark.asyncio
    async def test_search_requires_api_key(self):
        with pytest.raises(MusicServiceError):
            await YouTubeAdapter().search_tracks("anything")

    def test_always_authenticated(self):
        assert YouTubeAdapter().is_authenticated()


class FakeResponse:
    """Minimal stand-in for an aiohttp response."""

    def __init__(self, status, payload=None, headers=None):
        self.status = status
        self.payload = payload if payload is not None else {}
        self.headers = headers or {}
        self.reason = "reason"

    async def json(self):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Replays queued responses (or raises queued exceptions) per request."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestBaseClient:
    """Test request handling shared by all adapters."""

    @pytest.mark.asyncio
    async def test_request_without_session_fails(self, youtube):
        with pytest.raises(MusicServiceError):
            await youtube._make_request("search")

    @pytest.mark.asyncio
    async def test_successful_request(self, spotify):
        spotify.session = FakeSession(FakeResponse(200, {"ok": True}))

        data = await spotify._make_request("search", {"q": "x"})

        assert data == {"ok": True}
        call = spotify.session.calls[0]
        assert call["url"] == "https://api.spotify.com/v1/search"
        assert call["params"] == {"q": "x"}
        assert call["headers"]["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_client_error_fails_immediately(self, youtube):
        youtube.session = FakeSession(FakeResponse(404, {"error": {"code": 404, "message": "not found"}}))

        with pytest.raises(MusicServiceError) as exc_info:
            await youtube._make_request("search")

        assert exc_info.value.status == 404
        assert "not found" in str(exc_info.value)
        assert len(youtube.session.calls) == 1

    @pytest.mark.asyncio
    async def test_error_body_on_success_status(self, youtube):
        youtube.session = FakeSession(FakeResponse(200, {"error": {"message": "quota exceeded"}}))

        with pytest.raises(MusicServiceError, match="quota exceeded"):
            await youtube._make_request("search")

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, youtube):
        youtube.session = FakeSession(FakeResponse(500), FakeResponse(200, {"items": []}))

        with patch.object(youtube, "_exponential_backoff", new=AsyncMock()) as mock_backoff:
            data = await youtube._make_request("search")

        assert data == {"items": []}
        mock_backoff.assert_awaited_once_with(0)

    @pytest.mark.asyncio
    async def test_timeouts_exhaust_retries(self, youtube):
        youtube.session = FakeSession(*[asyncio.TimeoutError() for _ in range(3)])

        with patch.object(youtube, "_exponential_backoff", new=AsyncMock()):
            with pytest.raises(MusicServiceError, match="timed out"):
                await youtube._make_request("search", retries=2)

        assert len(youtube.session.calls) == 3

    @pytest.mark.asyncio
    async def test_rate_limited_uses_retry_after(self, youtube):
        youtube.session = FakeSession(
            FakeResponse(429, headers={"Retry-After": "2"}),
            FakeResponse(200, {"items": []}),
        )

        with patch("moodmusic.api.base_client.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await youtube._make_request("search")

        mock_sleep.assert_awaited_once_with(2.0)


class TestRateLimiter:
    """Test rate limiter presets and bookkeeping."""

    def test_presets(self):
        spotify_limiter = UnifiedRateLimiter.for_spotify()
        youtube_limiter = UnifiedRateLimiter.for_youtube()

        assert spotify_limiter.calls_per_hour == 50
        assert spotify_limiter.calls_per_second is None
        assert youtube_limiter.calls_per_second == 5.0
        assert youtube_limiter.burst_size == 10

    @pytest.mark.asyncio
    async def test_usage_and_reset(self):
        limiter = UnifiedRateLimiter.for_spotify(calls_per_hour=10)
        await limiter.wait_if_needed()
        await limiter.wait_if_needed()

        usage = limiter.get_current_usage()
        assert usage["requests_last_hour"] == 2
        assert usage["hour_usage_percent"] == 20.0

        limiter.reset()
        assert limiter.get_current_usage()["requests_last_hour"] == 0


class TestMusicServiceFactory:
    """Test adapter creation and preference order."""

    def test_each_call_gets_its_own_adapter(self):
        factory = MusicServiceFactory(SystemConfig())

        first = factory.get_service("Spotify")
        second = factory.get_service("spotify")

        assert first is not second
        assert first.rate_limiter is second.rate_limiter

    @pytest.mark.asyncio
    async def test_overlapping_sessions_do_not_interfere(self):
        factory = MusicServiceFactory(SystemConfig(youtube_api_key="key"))

        async with factory.get_service("youtube") as outer:
            async with factory.get_service("youtube") as inner:
                assert outer is not inner
                assert outer.session is not inner.session
            assert inner.session is None
            assert outer.session is not None
            assert not outer.session.closed

        assert outer.session is None

    @pytest.mark.asyncio
    async def test_concurrent_recommendations(self):
        factory = MusicServiceFactory(SystemConfig(youtube_api_key="key"))
        payload = {"items": [{"id": {"videoId": "v1"}, "snippet": {"title": "Song"}}]}

        async def recommend(mood):
            async with factory.get_preferred_service() as service:
                with patch.object(service, "_make_request", new=AsyncMock(return_value=payload)):
                    await asyncio.sleep(0)
                    tracks = await service.get_recommendations_by_mood(mood)
                assert service.session is not None
                return tracks

        results = await asyncio.gather(recommend("happy"), recommend("sad"))

        assert [len(tracks) for tracks in results] == [1, 1]

    @pytest.mark.asyncio
    async def test_reentering_open_adapter_is_rejected(self):
        adapter = MusicServiceFactory(SystemConfig()).get_service("youtube")

        async with adapter:
            with pytest.raises(RuntimeError):
                await adapter.__aenter__()

    def test_adapters_satisfy_protocol(self):
        factory = MusicServiceFactory(SystemConfig())
        assert isinstance(factory.get_service("spotify"), MusicService)
        assert isinstance(factory.get_service("youtube"), MusicService)

    def test_unknown_service(self):
        with pytest.raises(ValueError):
            MusicServiceFactory(SystemConfig()).get_service("tidal")

    def test_prefers_authenticated_spotify(self):
        factory = MusicServiceFactory(SystemConfig(spotify_access_token="token"))
        assert factory.get_preferred_service().service_name == "Spotify"

    def test_falls_back_to_youtube(self):
        factory = MusicServiceFactory(SystemConfig())
        assert factory.get_preferred_service().service_name == "YouTube"

    def test_configured_youtube_wins(self):
        factory = MusicServiceFactory(SystemConfig(music_service="youtube", spotify_access_token="token"))
        assert factory.get_preferred_service().service_name == "YouTube"

    def test_configured_limits_are_applied(self):
        factory = MusicServiceFactory(SystemConfig(spotify_rate_limit=20))
        factory.get_service("spotify")

        stats = factory.get_rate_limiter_stats()

        assert list(stats) == ["spotify"]
        assert stats["spotify"]["calls_per_hour_limit"] == 20
