"""
Service Components

Pure analysis components used by the conversation engine. Each component
follows a single responsibility and holds no session state.
"""

from .mood_scorer import MoodScorer
from .intent_classifier import IntentClassifier
from .entity_extractor import EntityExtractor

__all__ = [
    "MoodScorer",
    "IntentClassifier",
    "EntityExtractor",
]
