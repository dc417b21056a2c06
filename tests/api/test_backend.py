"""
Tests for FastAPI backend endpoints.

Validates request handling and response formatting for the session
endpoints. Services are injected through dependency overrides; the music
catalog is mocked so no HTTP leaves the process.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from moodmusic.api.backend import app, get_music_service_factory, get_session_manager
from moodmusic.api.music_service import MusicServiceError
from moodmusic.models.track_models import Track
from moodmusic.services.session_manager_service import SessionManagerService


class FakeMusicService:
    """Catalog stand-in usable as an async context manager."""

    service_name = "Fake"

    def __init__(self):
        self.get_recommendations_by_mood = AsyncMock(return_value=[
            Track(id="t1", title="Walking on Sunshine", artist="Katrina and the Waves", uri="fake:t1"),
        ])

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


@pytest.fixture
def session_manager():
    """Seeded session manager shared by the test client."""
    return SessionManagerService(random_seed=1)


@pytest.fixture
def music_service():
    return FakeMusicService()


@pytest.fixture
def client(session_manager, music_service):
    """Test client with services injected; the lifespan is not run."""
    factory = Mock()
    factory.get_preferred_service.return_value = music_service

    app.dependency_overrides[get_session_manager] = lambda: session_manager
    app.dependency_overrides[get_music_service_factory] = lambda: factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def take_turn(client, session_id, text):
    response = client.post(f"/sessions/{session_id}/turns", json={"text": text})
    assert response.status_code == 200
    return response.json()


class TestHealth:
    """Test the health endpoint."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert set(data["components"]) == {"session_manager", "music_services"}


class TestTurns:
    """Test conversation turns."""

    def test_first_turn_is_greeting(self, client):
        data = take_turn(client, "s1", "hello")

        assert data["topic"] == "greeting"
        assert data["text"]
        assert data["analysis"]["intents"]["primary_intent"] == "greeting"

    def test_turn_returns_request_id(self, client):
        response = client.post(
            "/sessions/s1/turns",
            json={"text": "hello"},
            headers={"X-Request-ID": "req-42"},
        )
        assert response.headers["X-Request-ID"] == "req-42"

    def test_missing_text_is_rejected(self, client):
        response = client.post("/sessions/s1/turns", json={})
        assert response.status_code == 422

    def test_context_holds_transcript(self, client):
        take_turn(client, "s1", "hello")

        response = client.get("/sessions/s1/context")

        assert response.status_code == 200
        data = response.json()
        assert [entry["speaker"] for entry in data["transcript"]] == ["You", "AI"]
        assert data["context"]["current_topic"] == "greeting"

    def test_sessions_are_isolated(self, client):
        take_turn(client, "s1", "I love jazz")
        take_turn(client, "s2", "hello")

        data = client.get("/sessions/s2/context").json()
        assert data["context"]["mentioned_genres"] == []


class TestSessionAnalysis:
    """Test mood, conclusion and recommendation endpoints."""

    def test_session_mood(self, client):
        take_turn(client, "s1", "I'm feeling really happy today")

        response = client.get("/sessions/s1/mood")

        assert response.status_code == 200
        assert response.json()["dominant_mood"] == "happy"

    def test_conclusion(self, client):
        take_turn(client, "s1", "I'm feeling really happy today")

        response = client.post("/sessions/s1/conclusion")

        assert response.status_code == 200
        data = response.json()
        assert data["mood"] == "happy"
        assert "happy" in data["text"]
        assert data["recommendation_hint"] == {"mood": "happy", "limit": 3, "genre": None}

    def test_recommendations(self, client, music_service):
        take_turn(client, "s1", "I'm feeling really happy today")

        response = client.post("/sessions/s1/recommendations")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Fake"
        assert data["mood"] == "happy"
        assert data["tracks"][0]["title"] == "Walking on Sunshine"
        music_service.get_recommendations_by_mood.assert_awaited_once_with("happy", limit=3, genre=None)

    def test_catalog_failure_is_bad_gateway(self, client, music_service):
        music_service.get_recommendations_by_mood.side_effect = MusicServiceError("Fake", "HTTP 503", 503)
        take_turn(client, "s1", "hello")

        response = client.post("/sessions/s1/recommendations")

        assert response.status_code == 502
        assert response.json()["service"] == "Fake"

    @pytest.mark.parametrize("method,path", [
        ("get", "/sessions/missing/mood"),
        ("get", "/sessions/missing/context"),
        ("post", "/sessions/missing/conclusion"),
        ("post", "/sessions/missing/recommendations"),
    ])
    def test_unknown_session(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 404
        assert "error" in response.json()


class TestEndSession:
    """Test session teardown."""

    def test_end_session(self, client):
        take_turn(client, "s1", "hello")

        response = client.delete("/sessions/s1")
        assert response.json() == {"session_id": "s1", "ended": True}

        assert client.get("/sessions/s1/context").status_code == 404
        assert client.delete("/sessions/s1").json()["ended"] is False

    def test_next_turn_after_end_starts_fresh(self, client):
        take_turn(client, "s1", "I love jazz")
        client.delete("/sessions/s1")

        data = take_turn(client, "s1", "hello")

        assert data["topic"] == "greeting"
        assert data["context"]["mentioned_genres"] == []
