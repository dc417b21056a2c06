"""
Tests for SessionManagerService.

Validates per-session engine ownership, isolation, reset, teardown and
seeded reproducibility.
"""

from datetime import datetime, timedelta

import pytest

from moodmusic.models.conversation_models import Mood
from moodmusic.services.conversation_engine_service import ConversationEngine
from moodmusic.services.session_manager_service import SessionManagerService


@pytest.fixture
def session_manager():
    """Create a seeded SessionManagerService."""
    return SessionManagerService(random_seed=7)


class TestSessionLifecycle:
    """Test session creation, lookup and removal."""

    def test_get_or_create_returns_same_engine(self, session_manager):
        engine = session_manager.get_or_create("session-1")

        assert isinstance(engine, ConversationEngine)
        assert session_manager.get_or_create("session-1") is engine

    def test_get_does_not_create(self, session_manager):
        assert session_manager.get("missing") is None
        assert session_manager.active_sessions() == []

    def test_active_sessions(self, session_manager):
        session_manager.get_or_create("a")
        session_manager.get_or_create("b")
        assert sorted(session_manager.active_sessions()) == ["a", "b"]

    def test_end_removes_session(self, session_manager):
        session_manager.get_or_create("a")

        assert session_manager.end("a") is True
        assert session_manager.end("a") is False
        assert session_manager.get("a") is None

    def test_reset_replaces_engine(self, session_manager):
        engine = session_manager.get_or_create("a")
        engine.respond("I'm feeling really happy today")

        fresh = session_manager.reset("a")

        assert fresh is not engine
        assert fresh.transcript == []
        assert fresh.context.detected_moods == []
        assert session_manager.get("a") is fresh


class TestSessionIsolation:
    """Test that sessions never share state."""

    def test_contexts_are_independent(self, session_manager):
        first = session_manager.get_or_create("a")
        second = session_manager.get_or_create("b")

        first.respond("I'm feeling really happy today")

        assert first.context is not second.context
        assert first.context.detected_moods == [Mood.HAPPY]
        assert second.context.detected_moods == []
        assert second.transcript == []

    def test_random_sources_are_independent(self, session_manager):
        first = session_manager.get_or_create("a")
        second = session_manager.get_or_create("b")
        assert first.response_generator.rng is not second.response_generator.rng

    def test_seeded_sessions_replay_identically(self):
        replies = []
        for _ in range(2):
            engine = SessionManagerService(random_seed=3).get_or_create("s")
            replies.append([
                engine.respond(text).text
                for text in ["hello", "I'm feeling really happy today", "I love jazz"]
            ])

        assert replies[0] == replies[1]


class TestSessionLimits:
    """Test idle expiry and transcript trimming."""

    def test_idle_sessions_expire(self):
        manager = SessionManagerService(session_timeout_minutes=30)
        manager.get_or_create("idle").respond("hello")
        manager.get_or_create("busy").respond("hello")

        manager.session_store["idle"]["last_updated"] = datetime.now() - timedelta(minutes=31)

        assert manager.active_sessions() == ["busy"]
        assert manager.get("idle") is None

    def test_lookup_keeps_session_alive(self):
        manager = SessionManagerService(session_timeout_minutes=30)
        manager.get_or_create("a")
        manager.session_store["a"]["last_updated"] = datetime.now() - timedelta(minutes=29)

        manager.get_or_create("a")

        assert manager.session_store["a"]["last_updated"] > datetime.now() - timedelta(minutes=1)

    def test_many_abandoned_sessions_are_reclaimed(self):
        manager = SessionManagerService()
        for index in range(50):
            manager.get_or_create(f"s{index}").respond("hello")
        stale = datetime.now() - timedelta(hours=1)
        for session in manager.session_store.values():
            session["last_updated"] = stale

        manager.get_or_create("fresh")

        assert manager.active_sessions() == ["fresh"]

    def test_transcript_is_trimmed_to_recent_turns(self):
        manager = SessionManagerService(random_seed=1, max_transcript_entries=10)
        engine = manager.get_or_create("a")
        for index in range(6):
            engine.respond(f"message {index}")
        assert len(engine.transcript) == 12

        assert manager.get_or_create("a") is engine

        assert len(engine.transcript) == 4
        assert engine.transcript[0].text == "message 4"
        assert engine.transcript[0].speaker.value == "You"
        assert engine.transcript[2].text == "message 5"

    def test_short_transcript_is_untouched(self):
        manager = SessionManagerService(max_transcript_entries=10)
        engine = manager.get_or_create("a")
        engine.respond("hello")

        manager.get_or_create("a")

        assert len(engine.transcript) == 2
