"""
Conversation Context Service for the MoodMusic Engine

Folds one turn's analysis into a session's DialogueContext: topic, detected
moods, mentioned genres and artists, activity preference, stage and the
question-asked flag.
"""

from typing import Optional

import structlog

from ..models.conversation_models import DialogueContext, Speaker, TurnAnalysis
from .dialogue_policy import DialoguePolicy

logger = structlog.get_logger(__name__)

MOOD_CONFIDENCE_THRESHOLD = 0.3


class ConversationContextManager:
    """
    Applies per-turn analysis to an explicitly owned DialogueContext.

    Tracks:
    - Detected moods (most recent first)
    - Mentioned genres and artists
    - Activity preference
    - Conversation stage and topic
    """

    def __init__(self, policy: Optional[DialoguePolicy] = None):
        """Initialize conversation context manager."""
        self.policy = policy or DialoguePolicy()
        self.logger = logger.bind(component="ConversationContext")

    def update_context(self, context: DialogueContext, analysis: TurnAnalysis) -> DialogueContext:
        """
        Update session context with one turn's analysis.

        Args:
            context: Session context, mutated in place
            analysis: Intents, entities and mood of the new utterance

        Returns:
            The same context, for chaining
        """
        intents = analysis.intents
        self.policy.update_topic(context, intents.primary_intent, intents.primary_confidence)

        mood_analysis = analysis.mood_analysis
        if mood_analysis.confidence > MOOD_CONFIDENCE_THRESHOLD:
            if mood_analysis.dominant_mood not in context.detected_moods:
                context.detected_moods.insert(0, mood_analysis.dominant_mood)

        for genre in analysis.entities.genres:
            if genre not in context.mentioned_genres:
                context.mentioned_genres.append(genre)

        for artist in analysis.entities.artists:
            if artist not in context.mentioned_artists:
                context.mentioned_artists.append(artist)

        if analysis.entities.activities:
            context.user_preferences.activity = analysis.entities.activities[0]

        self.policy.advance_stage(context, intents.primary_intent)

        context.question_asked = self._last_agent_asked_question(context)

        self.logger.debug(
            "Context updated",
            topic=context.current_topic.value,
            stage=context.conversation_stage.value,
            detected_moods=[m.value for m in context.detected_moods],
            genres=context.mentioned_genres,
            artists=context.mentioned_artists,
            question_asked=context.question_asked,
        )

        return context

    def _last_agent_asked_question(self, context: DialogueContext) -> bool:
        for entry in reversed(context.conversation_history):
            if entry.speaker == Speaker.AGENT:
                return entry.text.endswith("?")
        return False
