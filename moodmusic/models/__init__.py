"""
Models Module

Data models and schemas for the MoodMusic engine.
"""

from .conversation_models import (
    Mood,
    Speaker,
    Intent,
    Topic,
    ConversationStage,
    TranscriptEntry,
    SecondaryMood,
    MoodAnalysisResult,
    IntentAnalysis,
    ExtractedEntities,
    TurnAnalysis,
    UserPreferences,
    DialogueContext,
    EngineResponse,
)
from .config_models import SystemConfig
from .track_models import Track

__all__ = [
    # Conversation models
    "Mood",
    "Speaker",
    "Intent",
    "Topic",
    "ConversationStage",
    "TranscriptEntry",
    "SecondaryMood",
    "MoodAnalysisResult",
    "IntentAnalysis",
    "ExtractedEntities",
    "TurnAnalysis",
    "UserPreferences",
    "DialogueContext",
    "EngineResponse",

    # Configuration
    "SystemConfig",

    # Catalog records
    "Track",
]
