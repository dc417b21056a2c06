"""
Services Module

Conversation services: per-turn engine, context tracking, dialogue policy,
response rendering and session ownership.
"""

from .conversation_engine_service import ConversationEngine
from .conversation_context_service import ConversationContextManager
from .dialogue_policy import DialoguePolicy
from .response_generator import ResponseGenerator
from .session_manager_service import SessionManagerService

__all__ = [
    # Engine
    "ConversationEngine",

    # Dialogue state
    "ConversationContextManager",
    "DialoguePolicy",
    "ResponseGenerator",

    # Sessions
    "SessionManagerService",
]
