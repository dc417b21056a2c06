"""
Session Manager Service for the MoodMusic Engine

Owns one ConversationEngine per session id. Sessions never share dialogue
state or randomness: every engine gets its own ``random.Random``, seeded from
the configured seed when one is set so that replays are reproducible.

Sessions idle for longer than the timeout are dropped, and each session's
transcript is trimmed once it grows past the configured size.
"""

import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import structlog

from .conversation_engine_service import ConversationEngine

logger = structlog.get_logger(__name__)

DEFAULT_SESSION_TIMEOUT_MINUTES = 30
DEFAULT_MAX_TRANSCRIPT_ENTRIES = 200


class SessionManagerService:
    """
    In-memory registry of conversation sessions.

    Features:
    - Lazy engine creation per session id
    - Reset without forgetting the session
    - Explicit session teardown
    - Idle expiry and transcript size limits
    """

    def __init__(
        self,
        random_seed: Optional[int] = None,
        session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
        max_transcript_entries: int = DEFAULT_MAX_TRANSCRIPT_ENTRIES
    ):
        """
        Initialize session manager.

        Args:
            random_seed: Seed for every session's template randomness
            session_timeout_minutes: Idle time after which a session is dropped
            max_transcript_entries: Transcript length that triggers trimming
        """
        self.random_seed = random_seed
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self.max_transcript_entries = max_transcript_entries
        self.session_store: Dict[str, Dict[str, Any]] = {}
        self.logger = logger.bind(component="SessionManager")

        self.logger.info(
            "Session Manager Service initialized",
            seeded=random_seed is not None,
            session_timeout_minutes=session_timeout_minutes,
            max_transcript_entries=max_transcript_entries
        )

    def get_or_create(self, session_id: str) -> ConversationEngine:
        """
        Return the engine owned by a session, creating it on first use.

        Args:
            session_id: Unique session identifier

        Returns:
            The session's conversation engine
        """
        self._expire_idle_sessions()

        session = self.session_store.get(session_id)
        if session is None:
            session = self._new_session()
            self.session_store[session_id] = session
            self.logger.info("Session created", session_id=session_id)
        else:
            session["last_updated"] = datetime.now()
            self._cleanup_session_if_needed(session_id, session)

        return session["engine"]

    def get(self, session_id: str) -> Optional[ConversationEngine]:
        """Return the session's engine without creating one."""
        self._expire_idle_sessions()
        session = self.session_store.get(session_id)
        return session["engine"] if session else None

    def reset(self, session_id: str) -> ConversationEngine:
        """
        Discard the session's conversation and start a fresh one.

        The session keeps its id; a fresh engine (and randomness) replaces
        the old one.
        """
        session = self._new_session()
        self.session_store[session_id] = session
        self.logger.info("Session reset", session_id=session_id)
        return session["engine"]

    def end(self, session_id: str) -> bool:
        """
        Remove a session.

        Returns:
            True if the session existed
        """
        if session_id in self.session_store:
            del self.session_store[session_id]
            self.logger.info("Session ended", session_id=session_id)
            return True
        return False

    def active_sessions(self) -> List[str]:
        """Ids of all live sessions."""
        self._expire_idle_sessions()
        return list(self.session_store.keys())

    def _new_session(self) -> Dict[str, Any]:
        now = datetime.now()
        return {
            "engine": ConversationEngine(rng=random.Random(self.random_seed)),
            "session_start": now,
            "last_updated": now,
        }

    def _expire_idle_sessions(self) -> None:
        cutoff = datetime.now() - self.session_timeout
        expired = [
            session_id for session_id, session in self.session_store.items()
            if session["last_updated"] < cutoff
        ]
        for session_id in expired:
            del self.session_store[session_id]

        if expired:
            self.logger.info("Expired idle sessions", count=len(expired), remaining=len(self.session_store))

    def _cleanup_session_if_needed(self, session_id: str, session: Dict[str, Any]) -> None:
        """Keep only the most recent half of an oversized transcript, in whole turns."""
        engine: ConversationEngine = session["engine"]
        if len(engine.transcript) <= self.max_transcript_entries:
            return

        keep_count = max(2, self.max_transcript_entries // 2 // 2 * 2)
        engine.transcript = engine.transcript[-keep_count:]
        self.logger.info("Trimmed session transcript", session_id=session_id, kept_entries=keep_count)
